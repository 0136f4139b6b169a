"""filectl - declarative file state reconciliation.

Compares the observed state of files and directories against a declared
state and applies the minimal set of operations to converge them.
"""

__version__ = "0.3.0"
