# QCA Bistable: quantum-dot cellular automata circuit simulator.
#
# Relaxes the polarization of every cell in a QCA layout under the bistable
# approximation while four phased clocks and the input waveforms evolve
# over a fixed number of time samples.
#
# Layout:
#   circuit     - cells, quantum dots, clocks and traces
#   engine      - neighbor search, kink energies and the relaxation loop
#   formats     - QCADesigner design files, engine settings and vector tables
#   controller  - one batch run from files to saved results
#   utils       - logging setup, result files, visualizations and reports

__version__ = "0.1.0"
