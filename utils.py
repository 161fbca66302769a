# utils.py
import paramiko
import logging
import getpass
from typing import Optional

logger = logging.getLogger(__name__)

def format_mac(mac: str) -> str:
    """Formats a MAC address to uppercase with colons."""
    return mac.strip().upper().replace("-", ":")

class CommandFailed(Exception):
    """Raised when a remote command cannot be run or exits non-zero."""

class SSHClient:
    """A utility class for handling SSH connections and command execution."""

    def __init__(self, hostname: str, username: str, password: Optional[str] = None,
                  timeout: int = 10):
        self.hostname = hostname
        self.username = username
        self.password = password
        self.timeout = timeout
        self.client: Optional[paramiko.SSHClient] = None

    def connect(self) -> bool:
        """Connects to the SSH server, using default SSH keys and agent."""
        self.client = paramiko.SSHClient()
        self.client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        try:
            if self.password:
                self.client.connect(hostname=self.hostname, username=self.username,
                                    password=self.password, timeout=self.timeout)
            else:
                try:
                    self.client.connect(hostname=self.hostname, username=self.username,
                                        timeout=self.timeout, look_for_keys=True, allow_agent=True)
                except paramiko.ssh_exception.PasswordRequiredException:
                    password = getpass.getpass(f"Enter password for {self.username}@{self.hostname}: ")
                    self.client.connect(hostname=self.hostname, username=self.username,
                                        password=password, timeout=self.timeout)
            return True
        except Exception as e:
            logger.error(f"Error connecting to {self.hostname}: {e}")
            self.client = None
            return False

    def execute_command(self, command: str) -> str:
        """Executes a command on the connected SSH server.

        Raises:
            CommandFailed: if not connected, the transport fails, or the
                command exits with a non-zero status.
        """
        if not self.client:
            raise CommandFailed("SSH client not connected. Call connect() first.")
        try:
            _, stdout, stderr = self.client.exec_command(command, timeout=self.timeout)
            output = stdout.read().decode()
            error = stderr.read().decode().strip()
            status = stdout.channel.recv_exit_status()
        except Exception as e:
            raise CommandFailed(f"Error executing command '{command}': {e}") from e
        if status != 0:
            raise CommandFailed(f"Command '{command}' exited with {status}: {error}")
        if error:
            logger.warning(f"Command '{command}' returned error: {error}")
        return output

    def close(self):
        """Closes the SSH connection."""
        if self.client:
            self.client.close()
            self.client = None
