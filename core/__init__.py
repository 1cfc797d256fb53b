"""
Core module for the live Eulerian video magnifier.

Contains the pipeline queue, typed messages and events, the control-plane
event bus, the magnification algorithm (pyramid, temporal filter bank,
amplification policy) and the pipeline stages.
"""
