"""Package Modelica library directories into .mol containers with a generated manifest."""

__version__ = "0.1.0"
__all__ = ["__version__"]