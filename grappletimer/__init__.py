"""GrappleTimer — round/rest interval timer with clapper warnings."""

__version__ = "0.1.0"
