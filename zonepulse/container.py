"""
Dependency Injection Container.

Este módulo proporciona el contenedor que crea y cachea las instancias
del motor, sus servicios y los colaboradores de transporte.

Es el único lugar donde se traducen los Settings a parámetros concretos.
"""

from dataclasses import dataclass, field
from typing import Optional

from zonepulse.app.application.backfill_usecase import BackfillUseCase
from zonepulse.app.application.process_tick_usecase import ProcessTickUseCase
from zonepulse.app.core.settings import Settings
from zonepulse.app.infrastructure.event_bus import EventBus
from zonepulse.app.infrastructure.finnhub_client import FinnhubClient
from zonepulse.app.infrastructure.history_client import HistoryClient
from zonepulse.app.services.analytics_engine import AnalyticsEngine
from zonepulse.app.services.candle_builder import CandleBuilder
from zonepulse.app.services.recommendation_engine import RecommendationEngine
from zonepulse.app.services.zone_detector import ZoneDetector
from zonepulse.app.state.engine_state import EngineState


@dataclass
class Container:
    """
    Contenedor de Inyección de Dependencias.

    Cada propiedad crea su instancia en el primer acceso (singleton
    dentro del contenedor).
    """

    settings: Settings = field(default_factory=Settings)

    _event_bus: Optional[EventBus] = None
    _engine: Optional[AnalyticsEngine] = None
    _history_client: Optional[HistoryClient] = None
    _finnhub_client: Optional[FinnhubClient] = None
    _process_tick: Optional[ProcessTickUseCase] = None

    # ==================== Infraestructura ====================

    @property
    def event_bus(self) -> EventBus:
        if self._event_bus is None:
            self._event_bus = EventBus(max_queue_size=self.settings.event_bus_max_queue_size)
        return self._event_bus

    @property
    def history_client(self) -> HistoryClient:
        if self._history_client is None:
            self._history_client = HistoryClient(
                self.settings.finnhub_rest_url,
                self.settings.finnhub_api_key,
                timeout=self.settings.history_timeout,
            )
        return self._history_client

    @property
    def finnhub_client(self) -> FinnhubClient:
        if self._finnhub_client is None:
            self._finnhub_client = FinnhubClient(
                self.event_bus,
                ws_url=self.settings.finnhub_ws_url,
                api_key=self.settings.finnhub_api_key,
                symbol=self.settings.symbol,
                reconnect_delay=self.settings.ws_reconnect_delay,
            )
        return self._finnhub_client

    # ==================== Motor ====================

    @property
    def engine(self) -> AnalyticsEngine:
        if self._engine is None:
            s = self.settings
            self._engine = AnalyticsEngine(
                s.symbol,
                state=EngineState.for_symbol(s.symbol, max_zones=s.max_zones),
                candle_builder=CandleBuilder(interval=s.candle_interval_seconds),
                zone_detector=ZoneDetector(
                    scan_interval=s.zone_scan_interval,
                    dedup_tolerance=s.zone_dedup_tolerance,
                ),
                recommendation_engine=RecommendationEngine(
                    stop_atr_multiplier=s.stop_atr_multiplier,
                    target_atr_multiplier=s.target_atr_multiplier,
                    base_confidence=s.base_confidence,
                    confidence_bonus=s.confidence_bonus,
                    max_confidence=s.max_confidence,
                ),
                snapshot_candle_window=s.snapshot_candle_window,
                export_candle_count=s.export_candle_count,
            )
        return self._engine

    # ==================== Use Cases ====================

    @property
    def process_tick(self) -> ProcessTickUseCase:
        if self._process_tick is None:
            self._process_tick = ProcessTickUseCase(self.event_bus, self.engine)
        return self._process_tick

    def get_backfill_usecase(self) -> BackfillUseCase:
        """Factory: cada llamada crea una instancia nueva."""
        return BackfillUseCase(
            self.history_client,
            self.engine,
            resolution=self.settings.candle_resolution,
            days=self.settings.history_days,
            max_candles=self.settings.max_history_candles,
        )

    # ==================== Lifecycle ====================

    def override(self, name: str, instance) -> None:
        """
        Override una dependencia (útil para tests con fakes).

        Args:
            name: Nombre de la dependencia (ej: 'history_client')
            instance: Instancia a usar
        """
        attr_name = f"_{name}"
        if hasattr(self, attr_name):
            setattr(self, attr_name, instance)
        else:
            raise ValueError(f"Unknown dependency: {name}")


# ==================== Global Container ====================

_container: Optional[Container] = None


def get_container() -> Container:
    """Obtiene la instancia global del contenedor."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def init_container(settings: Optional[Settings] = None) -> Container:
    """
    Inicializa el contenedor con configuración específica.

    Args:
        settings: Configuración opcional. Si es None, se lee del entorno.
    """
    global _container
    if settings is None:
        settings = Settings()
    _container = Container(settings=settings)
    return _container
