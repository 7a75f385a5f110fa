"""Type model and seed data loading."""

from .loader import MetamodelLoader, load_yaml

__all__ = ['MetamodelLoader', 'load_yaml']
