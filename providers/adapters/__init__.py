from providers.adapters.also import AlsoAdapter
from providers.adapters.elko import ElkoAdapter
from providers.adapters.ingram import IngramAdapter
from providers.adapters.nod import NodAdapter

__all__ = ["AlsoAdapter", "ElkoAdapter", "IngramAdapter", "NodAdapter"]
