#!/usr/bin/env python3
# -----------------------------------------------------------------------------
# Filename: credential_store.py
# Author: Rajaram Lakshmanan
# Description: Encrypted storage of the credentials used by the ingest
# service (deCONZ API key and InfluxDB token).
# License: MIT (see LICENSE)
# -----------------------------------------------------------------------------

import json
import logging
import os
from typing import Dict, Optional

from cryptography.fernet import Fernet, InvalidToken

logger = logging.getLogger("CredentialStore")

# Names of the credentials used by the ingest service
DECONZ_API_KEY = "deconz_api_key"
INFLUXDB_TOKEN = "influxdb_token"


class CredentialStore:
    """
    Encrypted storage of named credentials.

    All credentials are kept as one JSON object, encrypted with Fernet symmetric
    encryption. The key is kept in a separate file; both files are created with
    owner-only permissions.
    """

    def __init__(self, credential_file: str, key_file: str):
        """
        Initialize the Credential Store.

        Args:
            credential_file (str): Path of the encrypted credentials
            key_file (str): Path of the encryption key
        """
        self.credential_file = credential_file
        self.key_file = key_file

    def get(self, name: str) -> Optional[str]:
        """
        Return a credential, or None if it is not stored (or the store cannot be read).

        Args:
            name (str): Name of the credential, e.g. "deconz_api_key"
        """
        return self._load().get(name)

    def save(self, name: str, value: str) -> None:
        """
        Encrypt and store a credential. A missing key is generated.

        Args:
            name (str): Name of the credential
            value (str): The credential

        Raises:
            ValueError: If the credential is empty
            OSError: If the files cannot be written
        """
        if not value:
            raise ValueError(f"Cannot save empty credential '{name}'")

        credentials = self._load()
        credentials[name] = value

        cipher = Fernet(self._load_or_create_key())
        self._write_private(self.credential_file, cipher.encrypt(json.dumps(credentials).encode()))
        logger.info(f"Credential '{name}' saved to {self.credential_file}")

    # === Local Functions ===

    def _load(self) -> Dict[str, str]:
        """Decrypt all stored credentials; an unreadable store is treated as empty."""
        if not os.path.exists(self.credential_file):
            logger.debug(f"Credential file {self.credential_file} not found")
            return {}

        if not os.path.exists(self.key_file):
            logger.error(f"Cannot read credentials: key file {self.key_file} not found")
            return {}

        try:
            with open(self.key_file, 'rb') as f:
                cipher = Fernet(f.read())
            with open(self.credential_file, 'rb') as f:
                credentials = json.loads(cipher.decrypt(f.read()))
        except InvalidToken:
            logger.error("Invalid credential file or incorrect key. "
                         "The credential file may be corrupted or the key doesn't match.")
            return {}
        except (OSError, ValueError) as e:
            logger.error(f"Error loading credentials from {self.credential_file}: {e}")
            return {}

        if not isinstance(credentials, dict):
            logger.error(f"Credential file {self.credential_file} does not contain a credential map")
            return {}
        return credentials

    def _load_or_create_key(self) -> bytes:
        if os.path.exists(self.key_file):
            with open(self.key_file, 'rb') as f:
                return f.read()

        key = Fernet.generate_key()
        self._write_private(self.key_file, key)
        logger.info(f"Generated new encryption key {self.key_file}")
        return key

    @staticmethod
    def _write_private(path: str, data: bytes) -> None:
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(path, 'wb') as f:
            f.write(data)
        os.chmod(path, 0o600)
