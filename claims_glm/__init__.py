"""
Claim frequency GLM toolkit for the SingaporeAuto motor portfolio.
"""

__version__ = "0.1.0"
