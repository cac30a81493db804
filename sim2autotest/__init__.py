"""
Sim2AutoTest: validate simulation runs against hand-written expectation suites.
"""

__version__ = "0.1.0"
