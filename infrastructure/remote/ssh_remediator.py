"""Remediation over SSH.

Every attempt opens a fresh TCP connection and SSH transport, runs the reset
command on one session channel and tears everything down again. Nothing is
cached between attempts: the host being reset is often the one that just
dropped off the network.

Host keys are not verified.
"""
from __future__ import annotations

import asyncio
import socket
from typing import Callable, List, Optional, Tuple

import paramiko

from core.logging.logger import StructuredLogger
from domain.entities import RemediationOutcome, RemediationTarget
from domain.enums import RemediationFailure
from domain.exceptions import RemediationCommandError, RemediationConnectionError
from domain.interfaces import IRemediator

Connector = Callable[[Tuple[str, int], float], socket.socket]
TransportFactory = Callable[[socket.socket], paramiko.Transport]
KeyLoader = Callable[[str], paramiko.PKey]

_RECV_CHUNK = 32768


def load_private_key(path: str) -> paramiko.PKey:
    """Load an unencrypted private key of any type paramiko supports."""
    try:
        return paramiko.PKey.from_path(path)
    except (OSError, paramiko.SSHException, paramiko.UnknownKeyType, ValueError) as e:
        raise RemediationConnectionError(f"cannot load key file {path!r}: {e}") from e


def _connect(address: Tuple[str, int], timeout: float) -> socket.socket:
    return socket.create_connection(address, timeout=timeout)


class SSHRemediator(IRemediator):
    """Runs the reset command on the remediation host."""

    def __init__(
        self,
        logger: StructuredLogger,
        *,
        connect_timeout_s: float = 10.0,
        command_timeout_s: float = 120.0,
        connector: Connector = _connect,
        transport_factory: TransportFactory = paramiko.Transport,
        key_loader: KeyLoader = load_private_key,
    ) -> None:
        self.logger = logger
        self.connect_timeout_s = connect_timeout_s
        self.command_timeout_s = command_timeout_s
        self._connector = connector
        self._transport_factory = transport_factory
        self._key_loader = key_loader

    async def remediate(self, target: RemediationTarget) -> RemediationOutcome:
        try:
            output, status = await asyncio.to_thread(self.run, target)
        except RemediationConnectionError as e:
            return RemediationOutcome.failed(RemediationFailure.CONNECTION, str(e))
        except RemediationCommandError as e:
            return RemediationOutcome.failed(
                RemediationFailure.COMMAND,
                str(e),
                output=e.output,
                exit_status=e.exit_status,
            )
        return RemediationOutcome.ok(output, status)

    def run(self, target: RemediationTarget) -> Tuple[str, int]:
        """Blocking: connect, authenticate, run the command and close."""
        pkey: Optional[paramiko.PKey] = None
        if target.key_file:
            pkey = self._key_loader(target.key_file)

        self.logger.debug(lambda: f"ssh connect {target.username}@{target.address}")
        try:
            sock = self._connector((target.hostname, target.port), self.connect_timeout_s)
        except OSError as e:
            raise RemediationConnectionError(f"dial {target.address}: {e}") from e

        try:
            transport = self._transport_factory(sock)
        except (paramiko.SSHException, OSError) as e:
            sock.close()
            raise RemediationConnectionError(f"ssh transport to {target.address}: {e}") from e

        try:
            try:
                transport.start_client(timeout=self.connect_timeout_s)
            except (paramiko.SSHException, OSError, EOFError) as e:
                raise RemediationConnectionError(f"ssh handshake with {target.address}: {e}") from e
            self._authenticate(transport, target, pkey)
            return self._execute(transport, target)
        finally:
            transport.close()

    def _authenticate(
        self,
        transport: paramiko.Transport,
        target: RemediationTarget,
        pkey: Optional[paramiko.PKey],
    ) -> None:
        attempted: List[str] = []
        for method, value in target.auth_methods():
            attempted.append(method)
            try:
                if method == "password":
                    transport.auth_password(target.username, value)
                else:
                    transport.auth_publickey(target.username, pkey)
            except paramiko.AuthenticationException as e:
                self.logger.debug(lambda: f"ssh auth {method} rejected by {target.address}: {e}")
                continue
            except (paramiko.SSHException, OSError, EOFError) as e:
                raise RemediationConnectionError(f"ssh auth with {target.address}: {e}") from e
            if transport.is_authenticated():
                return
        raise RemediationConnectionError(
            f"ssh: unable to authenticate to {target.address}, attempted methods {attempted}"
        )

    def _execute(self, transport: paramiko.Transport, target: RemediationTarget) -> Tuple[str, int]:
        try:
            channel = transport.open_session(timeout=self.connect_timeout_s)
        except (paramiko.SSHException, OSError, EOFError) as e:
            raise RemediationConnectionError(f"ssh session on {target.address}: {e}") from e

        chunks: List[bytes] = []
        try:
            channel.set_combine_stderr(True)
            channel.settimeout(self.command_timeout_s)
            try:
                channel.exec_command(target.command)
                while True:
                    data = channel.recv(_RECV_CHUNK)
                    if not data:
                        break
                    chunks.append(data)
            except socket.timeout as e:
                raise RemediationCommandError(
                    f"command did not finish within {self.command_timeout_s:g}s",
                    output=self._decode(chunks),
                ) from e
            except paramiko.SSHException as e:
                raise RemediationCommandError(f"run {target.command!r}: {e}", output=self._decode(chunks)) from e
            status = channel.recv_exit_status()
        finally:
            channel.close()

        output = self._decode(chunks)
        if status != 0:
            reason = "exited without status" if status < 0 else f"exited with status {status}"
            raise RemediationCommandError(f"process {reason}", output=output, exit_status=status)
        return output, status

    @staticmethod
    def _decode(chunks: List[bytes]) -> str:
        return b"".join(chunks).decode("utf-8", errors="replace")
