"""Dependency injection container.

This module provides a simple DI container without external frameworks.
It allows registering and resolving dependencies for the application.

Design principles:
1. No magic - explicit registration and resolution
2. Testable - easy to swap implementations
3. Lazy loading - adapters instantiated on first use
4. Thread-safe - for server contexts
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional, Set, Type

from .config import AppConfig, get_config


@dataclass
class Container:
    """Dependency injection container.

    Usage:
        # Production
        container = Container.create_default()
        planner = container.resolve(PlannerService)

        # Testing
        container = Container()
        container.register(GeocoderPort, lambda: FakeGeocoder())
        geocoder = container.resolve(GeocoderPort)

    Attributes:
        config: Application configuration
    """

    config: AppConfig = field(default_factory=get_config)

    _factories: Dict[Type[Any], Callable[[], Any]] = field(default_factory=dict, repr=False)
    _singletons: Dict[Type[Any], Any] = field(default_factory=dict, repr=False)
    _singleton_types: Set[Type[Any]] = field(default_factory=set, repr=False)
    _lock: threading.RLock = field(default_factory=threading.RLock, repr=False)

    def register(
        self,
        port_type: Type[Any],
        factory: Callable[[], Any],
        singleton: bool = True,
    ) -> None:
        """Register a factory for a port type.

        Args:
            port_type: The type (usually a Protocol) to register.
            factory: A callable that creates instances of the type.
            singleton: If True, only one instance is created.
        """
        with self._lock:
            self._factories[port_type] = factory
            self._singletons.pop(port_type, None)
            if singleton:
                self._singleton_types.add(port_type)
            else:
                self._singleton_types.discard(port_type)

    def resolve(self, port_type: Type[Any]) -> Any:
        """Resolve an instance of a port type.

        Raises:
            KeyError: If the type is not registered.
        """
        with self._lock:
            if port_type not in self._factories:
                raise KeyError(f"Type not registered: {port_type}")

            if port_type in self._singleton_types:
                if port_type not in self._singletons:
                    self._singletons[port_type] = self._factories[port_type]()
                return self._singletons[port_type]

            return self._factories[port_type]()

    def is_registered(self, port_type: Type[Any]) -> bool:
        return port_type in self._factories

    def clear_singletons(self) -> None:
        """Clear all cached singletons.

        Call this in tests to ensure fresh instances.
        """
        with self._lock:
            self._singletons.clear()

    def clear_all(self) -> None:
        """Clear all registrations and singletons."""
        with self._lock:
            self._factories.clear()
            self._singletons.clear()
            self._singleton_types.clear()

    @classmethod
    def create_default(cls, config: Optional[AppConfig] = None) -> Container:
        """Create a container with default production bindings.

        Ports are bound to the network adapters; the language model is
        replaced by a disabled stand-in when no API key is configured,
        so every model-backed component runs on its deterministic path.

        Args:
            config: Optional configuration override.

        Returns:
            A configured Container instance.
        """
        from .adapters.cache import FifoEviction, InMemoryCache, NeverEvict, NullCache
        from .adapters.geocoding import NominatimGeocoderAdapter
        from .adapters.llm import DisabledLanguageModel, OpenAICompatibleModel
        from .adapters.poi import OverpassPOIProvider
        from .adapters.routing import OSRMRoutingAdapter
        from .adapters.sessions import InMemorySessionStore
        from .adapters.weather import OpenMeteoWeatherAdapter
        from .adapters.wiki import WikivoyageAdapter
        from .nlp.llm_json import StructuredLLM
        from .ports.cache import CachePort
        from .ports.geocoding import GeocoderPort
        from .ports.llm import LanguageModelPort
        from .ports.providers import POIProviderPort, RoutingPort, WeatherPort, WikiContentPort
        from .ports.sessions import SessionStorePort
        from .services import (
            ConstraintExtractor,
            ConstraintResolver,
            EditApplier,
            EditInterpreter,
            ExplanationGenerator,
            IntentClassifier,
            ItineraryBuilder,
            PlannerService,
            POISearchService,
            TipsService,
        )

        config = config or get_config()
        container = cls(config=config)

        # Process-scoped geocode cache
        geo = config.geocoding
        cache: Any
        if geo.cache_enabled:
            eviction = FifoEviction(geo.cache_max_size) if geo.cache_max_size else NeverEvict()
            cache = InMemoryCache(
                default_ttl_seconds=geo.cache_ttl_seconds,
                eviction=eviction,
                name="geocode",
            )
        else:
            cache = NullCache(name="geocode")
        container.register(CachePort, lambda: cache)

        # External data
        container.register(GeocoderPort, lambda: NominatimGeocoderAdapter(config.geocoding, cache))
        container.register(POIProviderPort, lambda: OverpassPOIProvider(config.poi))
        container.register(WeatherPort, lambda: OpenMeteoWeatherAdapter(config.weather))
        container.register(WikiContentPort, lambda: WikivoyageAdapter(config.wiki))
        container.register(
            RoutingPort,
            lambda: OSRMRoutingAdapter(config.routing) if config.routing.enabled else None,
        )

        # Language model
        def create_language_model() -> LanguageModelPort:
            if config.llm.is_available:
                return OpenAICompatibleModel(config.llm)
            return DisabledLanguageModel("No language model API key configured")

        container.register(LanguageModelPort, create_language_model)
        container.register(
            StructuredLLM,
            lambda: StructuredLLM(container.resolve(LanguageModelPort)),
        )

        # Sessions
        container.register(SessionStorePort, lambda: InMemorySessionStore())

        # Main service
        def create_planner() -> PlannerService:
            llm = container.resolve(StructuredLLM)
            planner_config = config.planner
            return PlannerService(
                sessions=container.resolve(SessionStorePort),
                classifier=IntentClassifier(llm, planner_config),
                extractor=ConstraintExtractor(llm),
                resolver=ConstraintResolver(container.resolve(GeocoderPort), planner_config),
                poi_search=POISearchService(container.resolve(POIProviderPort), config.poi),
                builder=ItineraryBuilder(container.resolve(RoutingPort), planner_config),
                interpreter=EditInterpreter(llm),
                applier=EditApplier(planner_config),
                explainer=ExplanationGenerator(llm),
                tips=TipsService(
                    container.resolve(WikiContentPort),
                    container.resolve(WeatherPort),
                    planner_config,
                    config.weather,
                ),
                config=planner_config,
            )

        container.register(PlannerService, create_planner)

        return container


# Global default container (lazy initialized)
_default_container: Optional[Container] = None
_container_lock = threading.Lock()


def get_container() -> Container:
    """Get the default application container.

    Returns:
        The default Container instance (creates one if needed).
    """
    global _default_container
    if _default_container is None:
        with _container_lock:
            if _default_container is None:
                _default_container = Container.create_default()
    return _default_container


def reset_container() -> None:
    """Reset the default container.

    Call this in tests to ensure a fresh container.
    """
    global _default_container
    with _container_lock:
        if _default_container is not None:
            _default_container.clear_all()
        _default_container = None
