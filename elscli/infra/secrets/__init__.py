from elscli.infra.secrets.prompt_provider import PromptPasswordProvider
from elscli.infra.secrets.static_provider import StaticPasswordProvider

__all__ = [
    "PromptPasswordProvider",
    "StaticPasswordProvider",
]
