"""GolemClient: resilient client runtime on top of a game transport."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from typing import Any

from ..chat.classifier import ChatClassifier
from ..chat.message import ParsedMessage
from ..chat.rules import EMPTY_RULE_SET
from ..config.model import ClientConfig
from ..config.servers import ServerProfile, find_profile
from ..constants import DEFAULT_QUIT_REASON
from ..errors.internal import FatalConnectionError, LoginAbortedError, RuleDefinitionError
from ..errors.triage import Disposition, ErrorTriage
from ..logging_config import log_structured_error
from ..utils.text import json_to_text, packet_to_text, strip_color
from .events import ClientEvent, EventBus
from .outbound_queue import OutboundQueue
from .protocols import (
    CredentialStore,
    Transport,
    TransportEvent,
    TransportFactory,
    TransportOptions,
)
from .state import ConnectionState, ConnectionStateMachine, TerminationCause


class GolemClient:
    """Single-server client wrapping a transport.

    Owns the connection state machine, the outbound queue and the event bus
    for its whole lifetime; ``init()`` resets them for every new connection.

    Attributes:
        config (ClientConfig): The client's options.
        profile (ServerProfile | None): Resolved server profile.
        events (EventBus): Subscribe here for client events.
    """

    def __init__(
        self,
        config: ClientConfig,
        transport_factory: TransportFactory,
        *,
        credential_store: CredentialStore | None = None,
        server_profiles: Iterable[ServerProfile] = (),
        triage: ErrorTriage | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Client options.
            transport_factory: Creates a transport for each ``init()``.
            credential_store: Session source, required when
                ``config.session_cache`` is set.
            server_profiles: Extra profiles, consulted before built-in ones.
            triage: Error classifier; the default rules are used if omitted.

        Raises:
            ValueError: If session caching is on but no store is given.
        """
        if config.session_cache and credential_store is None:
            raise ValueError("session_cache is enabled but no credential_store was given")
        self.config = config
        self._transport_factory = transport_factory
        self._credential_store = credential_store
        self._triage = triage or ErrorTriage()
        self.transport: Transport | None = None

        self.profile: ServerProfile | None = None
        if config.use_server_profiles:
            self.profile = find_profile(
                config.server, config.server_profile, server_profiles
            )
        rules = self.profile.chat_rules if self.profile else EMPTY_RULE_SET
        reserved = {event.value for event in ClientEvent} & set(rules.names)
        if reserved:
            raise RuleDefinitionError(
                f"chat rule names clash with client events: {', '.join(sorted(reserved))}"
            )
        self.classifier = ChatClassifier(rules)

        self.events = EventBus(owner=config.username)
        self._state = ConnectionStateMachine(
            self.events,
            login_timeout=config.login_timeout_seconds,
            teardown=self._on_login_timeout_teardown,
        )
        self._queue = OutboundQueue(
            self._transport_chat,
            min_interval=self.chat_delay / 1000,
            is_online=lambda: self._state.state is ConnectionState.LOGGED_IN,
        )
        logging.debug(
            f"🧩 Client created user={config.username} server={config.server} "
            f"profile={self.profile.name if self.profile else None} chat_delay={self.chat_delay}ms"
        )

    # ------------------------------------------------------------------ #
    # Public surface
    # ------------------------------------------------------------------ #
    @property
    def status(self) -> ConnectionState:
        return self._state.state

    @property
    def chat_delay(self) -> int:
        """Effective minimum milliseconds between outbound messages."""
        if self.config.chat_delay is not None:
            return self.config.chat_delay
        if self.profile and self.profile.chat_delay is not None:
            return self.profile.chat_delay
        return 0

    @property
    def rule_names(self) -> tuple[str, ...]:
        return self.classifier.rule_set.names

    def on(self, event: str | ClientEvent, handler: Any) -> Any:
        return self.events.on(event, handler)

    async def init(self, reason: str | None = None) -> None:
        """(Re)connect.

        Tears down any previous transport, resets the state machine and the
        outbound queue, fetches fresh credentials when session caching is
        on, and creates a new transport. Waits for login when
        ``config.wait_for_login`` is set.

        Raises:
            Exception: Whatever the credential store raised; the client is
                left DISCONNECTED.
            ConnectionTerminatedError: When waiting for login and the
                attempt fails.
        """
        self._teardown_transport(reason)
        self._state.reset(reason)
        self._queue.reset()
        self._state.begin()

        attempt = self._state.attempt
        session = None
        if self.config.session_cache and self._credential_store is not None:
            try:
                session = await self._credential_store.get_valid_session(
                    self.config.username,
                    self.config.password or "",
                    self.config.session_cache_name,
                )
            except Exception as e:
                log_structured_error(
                    "auth",
                    "Could not obtain a valid session",
                    exception=e,
                    context={"user": self.config.username},
                )
                if self._state.attempt == attempt:
                    self._state.on_terminated(
                        TerminationCause.fatal(f"session unavailable: {e}")
                    )
                raise

        if self._state.attempt != attempt or self.status is not ConnectionState.LOGGING_IN:
            # Timed out or superseded by another init() while fetching the session.
            logging.info(
                f"⏭️ Login attempt abandoned before connecting user={self.config.username} attempt={attempt}"
            )
            if self.config.wait_for_login:
                raise LoginAbortedError("Login attempt abandoned before connecting")
            return

        options = TransportOptions(
            host=self.config.server,
            port=self.config.port,
            username=self.config.username,
            password=None if session is not None else self.config.password,
            version=self.profile.version if self.profile else None,
            session=session,
        )
        try:
            self.transport = self._transport_factory(options)
        except Exception as e:
            log_structured_error(
                "network",
                "Transport could not be created",
                exception=e,
                context={"user": self.config.username, "server": self.config.server},
            )
            self._state.on_terminated(TerminationCause.fatal(f"transport unavailable: {e}"))
            raise
        self._register_events(self.transport)
        logging.info(
            f"🚀 Connecting user={self.config.username} server={self.config.server}:{self.config.port}"
        )

        if self.config.wait_for_login:
            await self.wait_for_login()

    def send(self, text: str, ignore_delay: bool = False) -> asyncio.Future[None]:
        """Send chat text, obeying the chat delay unless ``ignore_delay``.

        Raises:
            NotOnlineError: If the client is not logged in.
        """
        return self._queue.send(text, ignore_delay=ignore_delay)

    def send_now(self, text: str) -> asyncio.Future[None]:
        return self._queue.send(text, ignore_delay=True)

    def send_next(self, text: str) -> asyncio.Future[None]:
        """Queue text ahead of every waiting message."""
        return self._queue.send_next(text)

    def chat(self, text: str) -> asyncio.Future[None]:
        return self.send(text)

    def reply(self, message: ParsedMessage, text: str) -> asyncio.Future[None]:
        """Reply to a parsed message using its rule's reply format."""
        return self.send(message.format_reply(text))

    def wait_for_login(self) -> asyncio.Future[None]:
        return self._state.wait_for_login()

    def quit(self, reason: str | None = None) -> None:
        """Close the current connection; ``end`` fires when the transport reports it."""
        if self.transport is None:
            return
        self.transport.quit(reason or DEFAULT_QUIT_REASON)

    # ------------------------------------------------------------------ #
    # Transport wiring
    # ------------------------------------------------------------------ #
    def _transport_chat(self, text: str) -> None:
        if self.transport is None:
            raise RuntimeError("No transport to send through")
        self.transport.chat(text)

    def _teardown_transport(self, reason: str | None = None) -> None:
        transport, self.transport = self.transport, None
        if transport is None:
            return
        # Listeners first, so the old connection's end is not reported.
        transport.remove_all_listeners()
        try:
            transport.quit(reason or DEFAULT_QUIT_REASON)
        except Exception as e:  # noqa: BLE001
            logging.debug(
                f"⚠️ Transport quit failed during teardown error_type={type(e).__name__} error={str(e)}"
            )
        logging.debug(f"🧹 Transport torn down user={self.config.username}")

    def _on_login_timeout_teardown(self) -> None:
        self._teardown_transport("login timeout")
        self._queue.reset()

    def _register_events(self, transport: Transport) -> None:
        transport.on(TransportEvent.LOGIN, self._handle_login)
        transport.on(TransportEvent.END, self._handle_end)
        transport.on(TransportEvent.KICKED, self._handle_kicked)
        transport.on(TransportEvent.MESSAGE, self._handle_message)
        transport.on(TransportEvent.ACTION_BAR, self._handle_action_bar)
        transport.on(TransportEvent.ERROR, self._handle_error)
        transport.on(TransportEvent.SPAWN, lambda *_: self.events.emit(ClientEvent.SPAWN))
        transport.on(TransportEvent.RESPAWN, lambda *_: self.events.emit(ClientEvent.RESPAWN))
        transport.on(
            TransportEvent.PLAYER_JOINED,
            lambda player: self.events.emit(ClientEvent.PLAYER_JOIN, player),
        )
        transport.on(
            TransportEvent.PLAYER_LEFT,
            lambda player: self.events.emit(ClientEvent.PLAYER_LEAVE, player),
        )

    def _handle_login(self, *_: Any) -> None:
        self._state.on_login_succeeded()

    def _handle_end(self, *_: Any) -> None:
        self._queue.reset()
        self._state.on_terminated(TerminationCause.ended())

    def _handle_kicked(self, reason_raw: Any = None, was_logged_in: bool = False) -> None:
        reason = json_to_text(reason_raw)
        self._queue.reset()
        self._state.on_terminated(TerminationCause.kicked(reason, bool(was_logged_in)))

    def _handle_error(self, error: BaseException) -> None:
        verdict = self._triage.classify(error)
        if verdict.disposition is Disposition.TRANSIENT:
            logging.debug(
                f"🩹 Transient transport error absorbed error_type={type(error).__name__} error={str(error)}"
            )
            return
        if verdict.disposition is Disposition.PASSTHROUGH:
            self.events.emit(ClientEvent.ERROR, error)
            return

        reason = verdict.reason or "fatal transport error"
        fatal = FatalConnectionError(reason, data={"user": self.config.username})
        fatal.__cause__ = error
        log_structured_error(
            "fatal",
            reason,
            exception=error,
            context={"user": self.config.username, "state": self.status.value},
        )
        self._queue.reset()
        self._state.on_terminated(TerminationCause.fatal(reason))
        self.events.emit(ClientEvent.ERROR, fatal)

    def _chat_text(self, packet: Any) -> str:
        return strip_color(packet_to_text(packet, self.config.chat_strip_extra_spaces))

    def _handle_action_bar(self, packet: Any) -> None:
        self.events.emit(ClientEvent.ACTION_BAR, self._chat_text(packet))

    def _handle_message(self, packet: Any) -> None:
        text = self._chat_text(packet)
        self.events.emit(ClientEvent.MESSAGE, text)

        if not self.config.parse_chat:
            if self.config.emit_unknown_when_unparsed:
                self.events.emit(
                    ClientEvent.MESSAGE_UNKNOWN_TYPE, ParsedMessage.unknown(text), text
                )
            return

        parsed = self.classifier.classify(text)
        if parsed.is_unknown:
            self.events.emit(ClientEvent.MESSAGE_UNKNOWN_TYPE, parsed, text)
        else:
            self.events.emit(parsed.type, parsed, text)


__all__ = ["GolemClient"]
