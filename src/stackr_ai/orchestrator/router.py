"""Provider ordering for fallback."""

from collections.abc import Sequence
from typing import Dict, List, Tuple

from stackr_ai.providers.base import DISPATCHABLE_PROVIDERS, AIProvider

# Fixed fallback table; anything without its own row uses the Anthropic row.
FALLBACK_ORDER: Dict[AIProvider, Tuple[AIProvider, ...]] = {
    AIProvider.PERPLEXITY: (AIProvider.PERPLEXITY, AIProvider.OPENAI, AIProvider.ANTHROPIC),
    AIProvider.OPENAI: (AIProvider.OPENAI, AIProvider.PERPLEXITY, AIProvider.ANTHROPIC),
    AIProvider.ANTHROPIC: (AIProvider.ANTHROPIC, AIProvider.PERPLEXITY, AIProvider.OPENAI),
}
DEFAULT_FALLBACK_ORDER = FALLBACK_ORDER[AIProvider.ANTHROPIC]


class ProviderSelector:
    """Computes the sequence of providers to try for a request."""

    def __init__(self, universe: Sequence[AIProvider] = DISPATCHABLE_PROVIDERS):
        self.universe = tuple(universe)

    def order(
        self,
        preferred: AIProvider | str,
        auto_fallback: bool,
        universe: Sequence[AIProvider] | None = None,
    ) -> List[AIProvider]:
        """
        Return the providers to try, in order.

        Without fallback only the preferred provider is tried. With fallback
        the fixed table decides the order, restricted to ``universe``.
        """
        preferred = AIProvider(preferred)
        if not auto_fallback:
            return [preferred]

        allowed = set(self.universe if universe is None else universe)
        sequence = FALLBACK_ORDER.get(preferred, DEFAULT_FALLBACK_ORDER)
        return [provider for provider in sequence if provider in allowed]
