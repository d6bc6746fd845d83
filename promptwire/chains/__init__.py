from .builder import PromptBuilder
from .fragments import CurrentDateFragment, Fragment, StaticFragment
from .prompt_chain import PromptChain

__all__ = ["CurrentDateFragment", "Fragment", "PromptBuilder", "PromptChain", "StaticFragment"]
