# SPDX-License-Identifier: Apache-2.0
"""Register dataset metadata with the research base Solana program (create_dataset instruction)."""
from __future__ import annotations

import base64
import hashlib
import json
import logging
import struct
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import httpx
from solders.hash import Hash
from solders.instruction import AccountMeta, Instruction
from solders.keypair import Keypair
from solders.pubkey import Pubkey
from solders.system_program import ID as SYSTEM_PROGRAM_ID
from solders.transaction import Transaction

from arbase.config import settings
from arbase.core.exceptions import ChainRegistrationError
from arbase.models import Dataset

logger = logging.getLogger("arbase.chain")

MAX_FILE_NAME_BYTES = 100
MAX_ON_CHAIN_FILE_SIZE = 104_857_600


@dataclass
class ChainReceipt:
    signature: str
    dataset_address: str


@dataclass
class ProgramAddresses:
    registry: Pubkey
    reputation: Pubkey
    dataset: Pubkey


def anchor_discriminator(name: str) -> bytes:
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


def _vec(data: bytes) -> bytes:
    return struct.pack("<I", len(data)) + data


def encode_create_dataset_args(
    content_hash: bytes,
    ai_metadata: bytes,
    file_name: bytes,
    file_size: int,
    column_count: int,
    row_count: int,
    quality_score: int,
    upload_timestamp: int,
    last_updated: int | None = None,
    download_count: int = 0,
    is_active: bool = True,
) -> bytes:
    """Borsh layout of the program's create_dataset arguments, prefixed by the Anchor discriminator."""
    if len(content_hash) != 32:
        raise ValueError("content_hash must be 32 bytes")
    if len(file_name) > MAX_FILE_NAME_BYTES:
        raise ValueError("file_name longer than 100 bytes")
    if not 0 <= quality_score <= 100:
        raise ValueError("quality_score must be 0-100")
    optional = b"\x00" if last_updated is None else b"\x01" + struct.pack("<q", last_updated)
    return b"".join([
        anchor_discriminator("create_dataset"),
        content_hash,
        _vec(ai_metadata),
        _vec(file_name),
        struct.pack("<QQQB", file_size, column_count, row_count, quality_score),
        struct.pack("<q", upload_timestamp),
        optional,
        struct.pack("<I", download_count),
        b"\x01" if is_active else b"\x00",
    ])


def derive_addresses(program_id: Pubkey, admin: Pubkey, contributor: Pubkey) -> ProgramAddresses:
    registry, _ = Pubkey.find_program_address([b"registry", bytes(admin)], program_id)
    reputation, _ = Pubkey.find_program_address([b"reputation", bytes(contributor)], program_id)
    dataset, _ = Pubkey.find_program_address([b"dataset", bytes(admin)], program_id)
    return ProgramAddresses(registry=registry, reputation=reputation, dataset=dataset)


def compact_metadata(dataset: Dataset) -> bytes:
    """Small JSON blob for the account: score, field, up to three tags."""
    try:
        tags = json.loads(dataset.tags or "[]")
    except (json.JSONDecodeError, TypeError):
        tags = []
    payload = {
        "score": dataset.ai_confidence_score or 0,
        "field": (dataset.research_field or "other")[:10],
        "tags": [str(t)[:15] for t in tags[:3]],
    }
    return json.dumps(payload, separators=(",", ":")).encode()


def load_keypair(value: str) -> Keypair:
    """Keypair from a JSON array of 64 ints, or from a file containing one."""
    raw = value.strip()
    if not raw.startswith("["):
        raw = Path(raw).read_text(encoding="utf-8")
    secret = json.loads(raw)
    if not isinstance(secret, list) or len(secret) != 64:
        raise ValueError("Solana keypair must be a JSON array of 64 integers")
    return Keypair.from_bytes(bytes(secret))


class SolanaRegistrar:
    """Signs create_dataset with the service keypair acting as admin, user and contributor."""

    def __init__(
        self,
        rpc_url: str | None = None,
        program_id: str | None = None,
        keypair: Keypair | None = None,
        http: httpx.Client | None = None,
    ):
        self.rpc_url = rpc_url
        self.program_id = Pubkey.from_string(program_id) if program_id else None
        self.keypair = keypair
        self.http = http

    @property
    def enabled(self) -> bool:
        return bool(self.rpc_url and self.program_id and self.keypair)

    def build_instruction(self, dataset: Dataset) -> tuple[Instruction, ProgramAddresses]:
        admin = self.keypair.pubkey()
        addresses = derive_addresses(self.program_id, admin, admin)
        data = encode_create_dataset_args(
            content_hash=bytes.fromhex(dataset.content_hash),
            ai_metadata=compact_metadata(dataset),
            file_name=dataset.file_name.encode("utf-8")[:MAX_FILE_NAME_BYTES],
            file_size=min(dataset.file_size, MAX_ON_CHAIN_FILE_SIZE),
            column_count=dataset.column_count,
            row_count=dataset.row_count,
            quality_score=max(0, min(100, dataset.ai_confidence_score or 0)),
            upload_timestamp=int(dataset.created_at.timestamp()),
        )
        accounts = [
            AccountMeta(admin, is_signer=True, is_writable=True),
            AccountMeta(admin, is_signer=True, is_writable=True),
            AccountMeta(admin, is_signer=True, is_writable=True),
            AccountMeta(addresses.registry, is_signer=False, is_writable=True),
            AccountMeta(addresses.dataset, is_signer=False, is_writable=True),
            AccountMeta(addresses.reputation, is_signer=False, is_writable=False),
            AccountMeta(SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        ]
        return Instruction(self.program_id, data, accounts), addresses

    def _rpc(self, method: str, params: list):
        client = self.http or httpx.Client(timeout=30.0)
        try:
            response = client.post(
                self.rpc_url,
                json={"jsonrpc": "2.0", "id": 1, "method": method, "params": params},
            )
            response.raise_for_status()
            body = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ChainRegistrationError(f"Solana RPC {method} failed: {e}")
        finally:
            if self.http is None:
                client.close()
        if not isinstance(body, dict):
            raise ChainRegistrationError(f"Solana RPC {method} returned a malformed response")
        error = body.get("error")
        if error:
            message = error.get("message", error) if isinstance(error, dict) else error
            raise ChainRegistrationError(f"Solana RPC {method} error: {message}")
        return body.get("result")

    def _latest_blockhash(self) -> Hash:
        result = self._rpc("getLatestBlockhash", [{"commitment": "confirmed"}])
        value = result.get("value") if isinstance(result, dict) else None
        blockhash = value.get("blockhash") if isinstance(value, dict) else None
        if not isinstance(blockhash, str):
            raise ChainRegistrationError("Solana RPC getLatestBlockhash returned no blockhash")
        try:
            return Hash.from_string(blockhash)
        except ValueError as e:
            raise ChainRegistrationError(f"Solana RPC getLatestBlockhash returned an invalid blockhash: {e}")

    def register_dataset(self, dataset: Dataset) -> ChainReceipt | None:
        if not self.enabled:
            return None
        instruction, addresses = self.build_instruction(dataset)
        blockhash = self._latest_blockhash()
        tx = Transaction.new_signed_with_payer([instruction], self.keypair.pubkey(), [self.keypair], blockhash)
        encoded = base64.b64encode(bytes(tx)).decode("ascii")
        signature = self._rpc(
            "sendTransaction",
            [encoded, {"encoding": "base64", "preflightCommitment": "confirmed"}],
        )
        if not isinstance(signature, str) or not signature:
            raise ChainRegistrationError("Solana RPC sendTransaction returned no signature")
        logger.info("Registered dataset %s on chain: %s", dataset.id, signature)
        return ChainReceipt(signature=signature, dataset_address=str(addresses.dataset))


@lru_cache
def get_registrar() -> SolanaRegistrar:
    if not settings.chain_enabled:
        return SolanaRegistrar()
    return SolanaRegistrar(
        rpc_url=settings.solana_rpc_url,
        program_id=settings.solana_program_id,
        keypair=load_keypair(settings.solana_keypair),
    )
