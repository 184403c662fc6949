"""Exception types for the research engine."""


class DeepResearchError(Exception):
    """Base exception for deepresearch."""


class SearchProviderError(DeepResearchError):
    """A search backend could not answer (network, HTTP status, missing key)."""


class ProviderContractError(DeepResearchError):
    """A search provider does not honour the provider interface."""


class InvalidStepTransition(DeepResearchError):
    """A research step or session was asked to move backwards."""
