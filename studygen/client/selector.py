"""One generator-shaped surface over both matching providers."""

from __future__ import annotations

import asyncio
from typing import Any, Optional, Sequence

from studygen.client.generators import MatchingGenerator
from studygen.modules.artifacts.models import ArtifactKind, Provider
from studygen.modules.documents import EncodedFile


class MatchingProviderSelector:
    """Delegates to the matching generator of the selected provider.

    The provider is read when ``submit`` is called. Changing it afterwards
    leaves the in-flight request alone; ``is_loading`` and ``partial``
    follow the generator that owns the latest submission while it is in
    flight, and the selected provider's generator otherwise.
    """

    kind = ArtifactKind.MATCHING

    def __init__(
        self,
        generators: dict[Provider, MatchingGenerator],
        provider: Provider = Provider.GOOGLE,
    ) -> None:
        missing = [p.value for p in Provider if p not in generators]
        if missing:
            raise ValueError(f"no matching generator for provider(s): {', '.join(missing)}")
        self._generators = dict(generators)
        self.provider = Provider(provider)
        self._last_submitted: Optional[Provider] = None

    @property
    def provider(self) -> Provider:
        return self._provider

    @provider.setter
    def provider(self, value: Provider) -> None:
        self._provider = Provider(value)

    @property
    def current(self) -> MatchingGenerator:
        return self._generators[self._provider]

    def generator_for(self, provider: Provider) -> MatchingGenerator:
        return self._generators[Provider(provider)]

    @property
    def active(self) -> MatchingGenerator:
        """Generator whose state is reported: last submitted, else current."""
        if self._last_submitted is not None:
            owner = self._generators[self._last_submitted]
            if owner.is_loading or owner is self.current:
                return owner
        return self.current

    @property
    def is_loading(self) -> bool:
        return self.active.is_loading

    @property
    def partial(self) -> list[Any]:
        return self.active.partial

    def submit(self, files: Sequence[EncodedFile], *, context: Any = None) -> asyncio.Task:
        generator = self.current
        self._last_submitted = generator.provider
        return generator.submit(files, context=context)
