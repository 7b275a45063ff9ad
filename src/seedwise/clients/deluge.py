"""
Deluge client implementation.
Provides integration with Deluge via the Web UI JSON-RPC interface.
"""

import base64
from typing import Any

import anyio
import msgspec
from aiohttp import ClientError, ClientSession, ClientTimeout, DummyCookieJar

from .. import logger
from ..config import ConfigError
from .client_common import (
    ClientAuthenticationError,
    ClientConnectionError,
    ClientReply,
    TorrentClient,
    TorrentState,
    parse_client_url,
)

# Message IDs wrap back to 0 past this value
MAX_MESSAGE_ID = 1024

# Deluge Web error code for a missing or expired session
DELUGE_NOT_AUTHENTICATED = 1

# State mapping for Deluge torrent client
DELUGE_STATE_MAPPING = {
    "Error": TorrentState.ERROR,
    "Paused": TorrentState.PAUSED,
    "Queued": TorrentState.QUEUED,
    "Checking": TorrentState.CHECKING,
    "Downloading": TorrentState.DOWNLOADING,
    "Downloading Metadata": TorrentState.METADATA_DOWNLOADING,
    "Finished": TorrentState.COMPLETED,
    "Seeding": TorrentState.SEEDING,
    "Allocating": TorrentState.ALLOCATING,
    "Moving": TorrentState.MOVING,
}


class DelugeSession(msgspec.Struct, frozen=True):
    """Connection state of a Deluge Web session.

    Every transition returns a new value; the client swaps its current one.

    Attributes:
        authenticated: Whether the session cookie is believed valid.
        cookie: Session cookie (``name=value``) sent with each request.
        message_id: Last used JSON-RPC message ID.
        label_supported: Whether the Label plugin is enabled, None if unknown.
    """

    authenticated: bool = False
    cookie: str = ""
    message_id: int = 0
    label_supported: bool | None = None

    def next_message(self) -> tuple[int, "DelugeSession"]:
        """Draw the next message ID.

        Returns:
            tuple[int, DelugeSession]: The ID to use and the new session.
        """
        message_id = self.message_id + 1
        counter = 0 if message_id > MAX_MESSAGE_ID else message_id
        return message_id, msgspec.structs.replace(self, message_id=counter)

    def logged_in(self, cookie: str) -> "DelugeSession":
        return msgspec.structs.replace(self, authenticated=True, cookie=cookie)

    def logged_out(self) -> "DelugeSession":
        return msgspec.structs.replace(self, authenticated=False, cookie="")

    def with_label_support(self, supported: bool) -> "DelugeSession":
        return msgspec.structs.replace(self, label_supported=supported)


class DelugeClient(TorrentClient):
    """Deluge torrent client implementation."""

    def __init__(
        self,
        url: str,
        label: str = "",
        skip_recheck: bool = False,
        session: ClientSession | None = None,
    ) -> None:
        super().__init__(label=label, skip_recheck=skip_recheck)
        self.client_config = parse_client_url(url)
        if self.client_config.username and not self.client_config.password:
            raise ConfigError(
                "You need to define a password in the Deluge URL "
                "(e.g. deluge+http://:<PASSWORD>@localhost:8112/json)"
            )
        self.endpoint = self.client_config.url
        self.session_state = DelugeSession()
        self._http = session
        # Single flight around the probe-or-login sequence
        self._auth_lock = anyio.Lock()

    @property
    def http(self) -> ClientSession:
        """aiohttp session, created on first use.

        Cookies are managed by hand, so the session keeps no cookie jar.
        """
        if self._http is None:
            self._http = ClientSession(
                timeout=ClientTimeout(total=60.0, connect=30.0),
                cookie_jar=DummyCookieJar(),
            )
        return self._http

    async def close(self) -> None:
        if self._http is not None and not self._http.closed:
            await self._http.close()

    # region Session management

    async def call(self, method: str, params: list[Any] | None = None) -> ClientReply:
        """Authenticate if needed and send a JSON-RPC call.

        Args:
            method (str): RPC method name.
            params (list[Any] | None): RPC parameters.

        Returns:
            ClientReply: Result or application level error of the call.

        Raises:
            ClientConnectionError: If Deluge cannot be reached.
            ClientAuthenticationError: If logging in is rejected.
        """
        await self._ensure_authenticated()
        data, _ = await self._post(method, params or [])
        reply = self._to_reply(data)

        error = data.get("error")
        if isinstance(error, dict) and error.get("code") == DELUGE_NOT_AUTHENTICATED:
            # Next call logs in again
            self.session_state = self.session_state.logged_out()

        return reply

    async def _ensure_authenticated(self) -> None:
        """Log in, or probe an existing session and log in once if it expired."""
        async with self._auth_lock:
            if self.session_state.authenticated:
                if await self._check_session():
                    return
                logger.debug("Deluge session expired, re-authenticating")
                self.session_state = self.session_state.logged_out()
            await self._login()

    async def _login(self) -> None:
        data, cookies = await self._post("auth.login", [self.client_config.password or ""])
        if data.get("result") and cookies:
            cookie = cookies[0].split(";")[0]
            self.session_state = self.session_state.logged_in(cookie)
            logger.debug("Authenticated to Deluge at %s", self.endpoint)
            return

        logger.debug("Deluge login rejected: %s", data.get("error"))
        raise ClientAuthenticationError(
            f"Failed to authenticate to the Deluge web UI at {self.endpoint}"
        )

    async def _check_session(self) -> bool:
        data, _ = await self._post("auth.check_session", [])
        return bool(data.get("result"))

    async def _post(
        self, method: str, params: list[Any]
    ) -> tuple[dict[str, Any], list[str]]:
        """Wrap a call in a JSON-RPC envelope and send it.

        Returns:
            tuple[dict[str, Any], list[str]]: Decoded reply body and the
                ``Set-Cookie`` headers of the response.
        """
        message_id, self.session_state = self.session_state.next_message()
        body = {"id": message_id, "method": method, "params": params}
        headers = {"Content-Type": "application/json"}
        if self.session_state.cookie:
            headers["Cookie"] = self.session_state.cookie
        return await self._send(body, headers)

    async def _send(
        self, body: dict[str, Any], headers: dict[str, str]
    ) -> tuple[dict[str, Any], list[str]]:
        """Send one HTTP request to the JSON endpoint.

        Raises:
            ClientConnectionError: On transport failure, non-200 status or a
                body that is not a JSON object.
        """
        try:
            async with self.http.post(
                self.endpoint, data=msgspec.json.encode(body), headers=headers
            ) as response:
                content = await response.read()
                status = response.status
                cookies = response.headers.getall("Set-Cookie", [])
        except (ClientError, TimeoutError) as e:
            raise ClientConnectionError(f"Could not reach Deluge: {self.endpoint}") from e

        if status != 200:
            logger.debug("Response content (first 500 bytes): %s", content[:500])
            raise ClientConnectionError(
                f"Deluge returned HTTP {status} for {body['method']}"
            )

        try:
            data = msgspec.json.decode(content)
        except msgspec.DecodeError as e:
            raise ClientConnectionError(
                f"Invalid response from Deluge for {body['method']}"
            ) from e
        if not isinstance(data, dict):
            raise ClientConnectionError(
                f"Invalid response from Deluge for {body['method']}"
            )
        return data, cookies

    @staticmethod
    def _to_reply(data: dict[str, Any]) -> ClientReply:
        error = data.get("error")
        if error:
            message = error.get("message") if isinstance(error, dict) else str(error)
            return ClientReply(error=message or "unknown error")
        return ClientReply(result=data.get("result"))

    # endregion

    # region TorrentClient

    async def validate_config(self) -> None:
        """Authenticate and detect label support.

        Raises:
            ClientConnectionError: If Deluge cannot be reached.
            ClientAuthenticationError: If the password is rejected.
        """
        await self._ensure_authenticated()
        await self.label_supported()
        logger.success("Connected to Deluge at %s", self.endpoint)

    async def get_torrent_state(self, torrent_hash: str) -> TorrentState | None:
        """Get the state of a torrent.

        Args:
            torrent_hash (str): Torrent hash.

        Returns:
            TorrentState | None: Current state, ``TorrentState.UNKNOWN`` if
                the lookup returned an error, None if Deluge does not know the
                torrent.
        """
        reply = await self.call("core.get_torrent_status", [torrent_hash, ["state"]])
        if not reply.ok:
            logger.warning(
                "Failed to look up torrent %s in Deluge: %s", torrent_hash, reply.error
            )
            return TorrentState.UNKNOWN
        if not isinstance(reply.result, dict) or not reply.result:
            return None
        return DELUGE_STATE_MAPPING.get(reply.result.get("state"), TorrentState.UNKNOWN)

    async def add_torrent(
        self, filename: str, torrent_data: bytes, download_dir: str | None = None
    ) -> ClientReply:
        """Add torrent to Deluge.

        Args:
            filename (str): File name to submit the torrent under.
            torrent_data (bytes): Torrent file data.
            download_dir (str | None): Download location override.

        Returns:
            ClientReply: Reply carrying the new torrent hash on success.
        """
        torrent_b64 = base64.b64encode(torrent_data).decode()
        return await self.call(
            "core.add_torrent_file",
            [filename, torrent_b64, self._format_add_options(download_dir)],
        )

    def _format_add_options(self, download_dir: str | None) -> dict[str, Any]:
        options: dict[str, Any] = {
            "file_priorities": [],
            "add_paused": False,
            "seed_mode": self.skip_recheck,
            "compact_allocation": True,
            "max_connections": -1,
            "max_download_speed": -1,
            "max_upload_slots": -1,
            "max_upload_speed": -1,
            "prioritize_first_last_pieces": False,
        }
        if download_dir:
            options["download_location"] = download_dir
        return options

    async def label_supported(self) -> bool:
        """Check once per session whether the Label plugin is enabled.

        Error replies are not cached, the next call asks again.
        """
        if self.session_state.label_supported is not None:
            return self.session_state.label_supported

        reply = await self.call("core.get_enabled_plugins", [])
        if not reply.ok:
            logger.warning("Failed to list Deluge plugins: %s", reply.error)
            return False

        supported = isinstance(reply.result, list) and "Label" in reply.result
        if not supported:
            logger.debug("Deluge Label plugin is not enabled, labels disabled")
        self.session_state = self.session_state.with_label_support(supported)
        return supported

    async def set_torrent_label(self, torrent_hash: str, label: str) -> ClientReply:
        return await self.call("label.set_torrent", [torrent_hash, label])

    async def add_label(self, label: str) -> ClientReply:
        return await self.call("label.add", [label])

    # endregion
