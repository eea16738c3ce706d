"""
Variable interpolation module.
Resolves build-variable placeholders in step inputs.
"""

from .substitution import VariableInterpolator, VariableResolver, MappingResolver, interpolate

__all__ = ['VariableInterpolator', 'VariableResolver', 'MappingResolver', 'interpolate']
