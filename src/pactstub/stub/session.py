"""
PactStub Simulation Session

The Stub owns at most one listener and decides what it answers: either
interactions replayed from a loaded contract, or echoed request bodies.

Features:
- Load contracts from JSON text, a file, or a pact broker
- Provider-state and description filters with fluent chaining
- Echo mode for connectivity checks
- Snapshot state so concurrent requests see a consistent contract and filters
"""

from __future__ import annotations  # Enable forward references for type hints

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, Optional

from ..common.errors import FetchError, InvalidContract
from ..common.logging_utils import resolve_level
from ..sources import BrokerSource, ContractSource, FileSource, TextSource
from .config import StubConfig
from .contract import ContractDocument, Interaction, parse_contract
from .filters import FilterState, NO_FILTERS
from .listener import HttpListener
from .matcher import BodyMatchRules, IncomingRequest, InteractionMatcher, MatchResult
from .server import StubMetrics, StubResponse, create_app


SimulationCallback = Callable[[int, IncomingRequest], StubResponse]


@dataclass(frozen=True)
class SimulationState:
    """Everything a request handler reads, published as one snapshot."""

    document: ContractDocument = field(default_factory=ContractDocument)
    filters: FilterState = NO_FILTERS
    match_body: bool = True


class Stub:
    """
    HTTP stub replaying pact interactions.

    Example:
        with Stub.create(9000).from_file('consumer-provider.json') as stub:
            stub.filter_on_provider_state('a widget exists')
            requests.get('http://127.0.0.1:9000/widgets/1')

        # Echo mode
        stub = Stub.create(9001)
        stub.echo(201)
        ...
        stub.dispose()
    """

    def __init__(
        self,
        port: Optional[int] = None,
        config: Optional[StubConfig] = None,
        logger: Optional[logging.Logger] = None,
        broker_source: Optional[ContractSource] = None
    ):
        """
        Initialize stub.

        Args:
            port: Port to bind (overrides config; 0 picks a free port)
            config: Optional StubConfig
            logger: Diagnostics logger (defaults to the "pactstub.stub" logger)
            broker_source: Source used by from_broker (built from config if None)
        """
        self.config = config or StubConfig()
        self.requested_port = self.config.port if port is None else port

        if logger is None:
            logger = logging.getLogger("pactstub.stub")
            logger.setLevel(resolve_level(self.config.log_level))
        self.logger = logger

        self.metrics = StubMetrics()
        self.matcher = InteractionMatcher(BodyMatchRules(
            array_order_sensitive=self.config.array_order_sensitive,
            allow_type_coercion=self.config.allow_type_coercion
        ))

        if broker_source is None:
            # Environment credentials go to a copy; the caller's config is left as given
            broker_config = replace(self.config).apply_env()
            broker_source = BrokerSource(
                timeout=broker_config.broker_timeout,
                username=broker_config.broker_username,
                password=broker_config.broker_password,
                token=broker_config.broker_token
            )
        self.broker_source = broker_source

        self._lock = threading.RLock()
        self._state = SimulationState(match_body=self.config.match_body)
        self._listener: Optional[HttpListener] = None
        self._echo_status: Optional[int] = None
        self.mode: Optional[str] = None

    @classmethod
    def create(cls, port: Optional[int] = None, **kwargs) -> 'Stub':
        """Create a stub for the given port."""
        return cls(port, **kwargs)

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def port(self) -> Optional[int]:
        """Port the active listener is bound to, or None when idle."""
        listener = self._listener
        return listener.port if listener is not None else None

    @property
    def is_bound(self) -> bool:
        listener = self._listener
        return listener is not None and listener.is_bound

    @property
    def url(self) -> Optional[str]:
        port = self.port
        if port is None:
            return None
        return f"http://{self.config.host}:{port}"

    @property
    def document(self) -> ContractDocument:
        return self._state.document

    @property
    def filters(self) -> FilterState:
        return self._state.filters

    @property
    def match_body(self) -> bool:
        return self._state.match_body

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def from_json(self, pact: str, match_body: bool = True) -> 'Stub':
        """
        Load the pact from a JSON string and start simulating it.

        Raises:
            InvalidContract: If the text is not valid JSON
            PortUnavailable: If the port cannot be bound
        """
        self.logger.info("Loading the pact from the pact string...")
        return self.load(TextSource(), pact, match_body)

    def from_file(self, pact_file_path: str, match_body: bool = True) -> 'Stub':
        """
        Load the pact from a file and start simulating it.

        Raises:
            FetchError: If the file does not exist or cannot be read
            InvalidContract: If the file is not valid JSON
            PortUnavailable: If the port cannot be bound
        """
        self.logger.info("Loading the pact from the pact file...")
        return self.load(FileSource(), str(pact_file_path), match_body)

    def from_broker(self, pact_broker_url: str, match_body: bool = True) -> 'Stub':
        """
        Load the pact from a pact broker and start simulating it.

        Raises:
            FetchError: If the broker request fails
            InvalidContract: If the broker returned invalid JSON
            PortUnavailable: If the port cannot be bound
        """
        self.logger.info("Loading the pact from the broker...")
        return self.load(self.broker_source, pact_broker_url, match_body)

    def load(self, source: ContractSource, locator: str, match_body: bool = True) -> 'Stub':
        """
        Fetch, validate and simulate a contract.

        Any running simulation is stopped first, so a failed load always
        leaves the stub idle.

        Args:
            source: Contract source to fetch from
            locator: Text, path or URL understood by the source
            match_body: Compare request bodies when matching

        Returns:
            self, for chaining
        """
        with self._lock:
            self._stop_listener()

            try:
                pact = source.fetch(locator)
            except FetchError as e:
                self.logger.error(f"Failed to fetch the pact: {e}")
                raise

            self.logger.info("Validate the pact file as JSON...")
            try:
                document = parse_contract(pact)
            except InvalidContract as e:
                self.logger.error(f"Failed to read the pact file. {e}")
                raise

            self._state = replace(self._state, document=document, match_body=match_body)
            self.logger.info(
                f"Loaded {len(document)} interactions"
                + (f" ({document.consumer} -> {document.provider})" if document.consumer or document.provider else "")
            )

            self._simulate(self._pact_callback, mode='pact')
        return self

    def echo(self, status_code: int) -> 'Stub':
        """
        Start an echo simulation returning request bodies with a fixed status.

        Args:
            status_code: Status code for every response

        Returns:
            self, for chaining (also usable as a context manager)
        """
        with self._lock:
            self._stop_listener()
            self._echo_status = int(status_code)
            self._simulate(self._echo_callback, mode='echo')
        return self

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def filter_on_provider_state(self, provider_state: str) -> 'Stub':
        with self._lock:
            self._state = replace(self._state, filters=self._state.filters.with_provider_state(provider_state))
        self.logger.debug(f"Provider state filter set to {provider_state!r}")
        return self

    def filter_on_description(self, description: str) -> 'Stub':
        with self._lock:
            self._state = replace(self._state, filters=self._state.filters.with_description(description))
        self.logger.debug(f"Description filter set to {description!r}")
        return self

    def clear_filters(self) -> 'Stub':
        with self._lock:
            self._state = replace(self._state, filters=NO_FILTERS)
        self.logger.debug("Filters cleared")
        return self

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def _simulate(self, callback: SimulationCallback, mode: str):
        """Bind a fresh listener whose requests are answered by callback."""
        self.logger.info(f"Start running the {mode} simulation on port {self.requested_port}")

        listener = HttpListener(
            host=self.config.host,
            startup_timeout=self.config.startup_timeout,
            logger=self.logger
        )

        def handle(request: IncomingRequest) -> StubResponse:
            return callback(listener.port, request)

        app = create_app(
            handle,
            config=self.config,
            metrics=self.metrics,
            inspector=self,
            logger=self.logger
        )

        listener.bind(self.requested_port, app)
        self._listener = listener
        self.mode = mode

    def _stop_listener(self):
        listener = self._listener
        self._listener = None
        self.mode = None
        if listener is not None:
            listener.unbind()

    def dispose(self):
        """Stop the active simulation and release the port. Idempotent."""
        with self._lock:
            self._stop_listener()

    def __enter__(self) -> 'Stub':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.dispose()

    # ------------------------------------------------------------------
    # Callbacks
    # ------------------------------------------------------------------

    def _pact_callback(self, port: int, request: IncomingRequest) -> StubResponse:
        state = self._state
        self.logger.debug(f"Pact simulation on port {port}: {request.method} {request.path}")

        result = self.matcher.find_match(request, state.document, state.filters, state.match_body)

        if result.matched:
            self.metrics.record('matched')
            self.logger.debug(f"Match result: {result.to_dict()}")
            return self._create_response(result.interaction)

        self.metrics.record('unmatched')
        self.logger.warning(f"No interaction matched {request.method} {request.path} ({result.reason})")
        return self._create_no_match_response(request, state, result)

    def _echo_callback(self, port: int, request: IncomingRequest) -> StubResponse:
        self.logger.debug(f"Echo simulation on port {port}: {request.method} {request.path}")
        self.metrics.record('echoed')
        return StubResponse(
            status=self._echo_status,
            body=request.body,
            media_type='text/plain; charset=utf-8'
        )

    def _create_response(self, interaction: Interaction) -> StubResponse:
        template = interaction.response
        headers = dict(template.headers)
        headers['X-PactStub-Matched'] = 'true'
        return StubResponse(
            status=template.status,
            body=template.render_body(),
            headers=headers,
            media_type=template.content_type()
        )

    def _create_no_match_response(
        self,
        request: IncomingRequest,
        state: SimulationState,
        result: MatchResult
    ) -> StubResponse:
        """
        Build the diagnostic response for a request no interaction satisfied.

        Returns:
            StubResponse with the configured 5xx status and a JSON body
        """
        payload = {
            'error': 'No contract interaction satisfied this request',
            'reason': result.reason,
            'request': {
                'method': request.method,
                'path': request.path,
                'query': {k: list(v) for k, v in request.query.items()}
            },
            'filters': state.filters.to_dict(),
            'debug': {
                'total_interactions': len(state.document),
                'match_body': state.match_body,
                'rejections': result.rejections[:10]
            }
        }
        return StubResponse.json(
            self.config.no_match_status,
            payload,
            headers={'X-PactStub-Matched': 'false'}
        )

    # ------------------------------------------------------------------
    # Admin API support
    # ------------------------------------------------------------------

    def describe_interactions(self) -> Dict[str, Any]:
        """Summary of the loaded contract for the admin API."""
        summary = self._state.document.to_summary()
        summary['mode'] = self.mode
        return summary
