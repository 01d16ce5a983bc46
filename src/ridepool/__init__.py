"""Route matching for ride pooling: does a passenger's trip lie along a driver's route?"""

__version__ = "0.1.0"
