"""
Ledger anchor client for the vote-validation smart contract.
"""
import asyncio
from dataclasses import dataclass, asdict
from typing import Any, Awaitable, Dict, Optional, TypeVar

from eth_account import Account
from loguru import logger
from web3 import AsyncWeb3, AsyncHTTPProvider
from web3.exceptions import ContractLogicError, TimeExhausted

from votechain.core.config import Settings
from votechain.core.exceptions import LedgerUnavailable, LedgerRejected

T = TypeVar("T")

ZERO_HASH = b"\x00" * 32

VOTE_VALIDATION_ABI = [
    {
        "type": "function",
        "name": "submitVoteHash",
        "stateMutability": "nonpayable",
        "inputs": [
            {"name": "electionId", "type": "string"},
            {"name": "voteHash", "type": "bytes32"},
            {"name": "voterHash", "type": "bytes32"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "validateVote",
        "stateMutability": "view",
        "inputs": [
            {"name": "electionId", "type": "string"},
            {"name": "voteHash", "type": "bytes32"},
        ],
        "outputs": [
            {"name": "", "type": "bool"},
            {"name": "", "type": "uint256"},
            {"name": "", "type": "address"},
        ],
    },
    {
        "type": "function",
        "name": "getElectionVoteCount",
        "stateMutability": "view",
        "inputs": [{"name": "electionId", "type": "string"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]


@dataclass
class AnchorReceipt:
    """Outcome of a confirmed hash submission."""
    tx_ref: str
    block_height: int
    gas_used: int
    confirmations: int


@dataclass
class LedgerRecord:
    """What the contract knows about an anchored vote hash."""
    confirmed: bool
    block_height: int
    submitter_ref: str


@dataclass
class NetworkStatus:
    """Ledger connectivity snapshot for dashboards."""
    connected: bool
    block_height: int = 0
    gas_price: str = "0"
    network_id: int = 0
    contract_address: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _hash_bytes(hex_digest: Optional[str]) -> bytes:
    if not hex_digest:
        return ZERO_HASH
    return bytes.fromhex(hex_digest.removeprefix("0x"))


class LedgerClient:
    """
    Client for anchoring vote hashes on an EVM ledger.

    This client handles:
    - Hash submission (signed write transactions)
    - Hash lookups and election vote counts (read-only calls)
    - Network status for dashboards

    The client is unavailable unless an RPC endpoint, a signing key and a
    contract address are all configured. Every call is bounded by a
    timeout; transport failures and timeouts surface as
    ``LedgerUnavailable`` and contract reverts as ``LedgerRejected``.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        private_key: Optional[str] = None,
        contract_address: Optional[str] = None,
        network: str = "sepolia",
        timeout: float = 30.0,
        receipt_timeout: float = 120.0
    ):
        self.network = network
        self.timeout = timeout
        self.receipt_timeout = receipt_timeout
        self.contract_address = contract_address or ""
        self._w3: Optional[AsyncWeb3] = None
        self._account = None
        self._contract = None

        if rpc_url and private_key and contract_address:
            self._w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url))
            self._account = Account.from_key(private_key)
            self._contract = self._w3.eth.contract(
                address=AsyncWeb3.to_checksum_address(contract_address),
                abi=VOTE_VALIDATION_ABI,
            )

    @classmethod
    def from_settings(cls, settings: Settings) -> "LedgerClient":
        return cls(
            rpc_url=settings.LEDGER_RPC_URL,
            private_key=settings.LEDGER_PRIVATE_KEY,
            contract_address=settings.LEDGER_CONTRACT_ADDRESS,
            network=settings.LEDGER_NETWORK,
            timeout=settings.LEDGER_TIMEOUT_SECONDS,
            receipt_timeout=settings.LEDGER_RECEIPT_TIMEOUT_SECONDS,
        )

    def is_available(self) -> bool:
        """Whether the client was configured with endpoint, key and contract."""
        return self._contract is not None

    async def close(self) -> None:
        if self._w3 is not None:
            await self._w3.provider.disconnect()

    async def _bounded(self, awaitable: Awaitable[T], operation: str) -> T:
        try:
            return await asyncio.wait_for(awaitable, timeout=self.timeout)
        except asyncio.TimeoutError as e:
            raise LedgerUnavailable(f"Ledger {operation} timed out after {self.timeout}s") from e

    def _require_contract(self) -> None:
        if not self.is_available():
            raise LedgerUnavailable("Ledger client is not configured")

    async def submit_hash(
        self,
        election_id: str,
        vote_hash: str,
        voter_hash: Optional[str] = None
    ) -> AnchorReceipt:
        """
        Anchor a vote hash and wait for its receipt.

        Args:
            election_id: Election the vote belongs to
            vote_hash: Hex digest of the vote contents
            voter_hash: Hex digest of the anonymised voter, if any

        Returns:
            AnchorReceipt with transaction reference and block metadata
        """
        self._require_contract()
        tx_ref: Optional[str] = None

        try:
            nonce = await self._bounded(
                self._w3.eth.get_transaction_count(self._account.address, "pending"),
                "nonce lookup"
            )
            tx = await self._bounded(
                self._contract.functions.submitVoteHash(
                    election_id,
                    _hash_bytes(vote_hash),
                    _hash_bytes(voter_hash),
                ).build_transaction({
                    "from": self._account.address,
                    "nonce": nonce,
                }),
                "transaction build"
            )
            signed = self._account.sign_transaction(tx)
            tx_hash = await self._bounded(
                self._w3.eth.send_raw_transaction(signed.raw_transaction),
                "transaction broadcast"
            )
            tx_ref = AsyncWeb3.to_hex(tx_hash)

            receipt = await self._w3.eth.wait_for_transaction_receipt(
                tx_hash,
                timeout=self.receipt_timeout
            )
            if receipt["status"] != 1:
                raise LedgerRejected("Anchor transaction reverted", tx_ref=tx_ref)

            head = await self._bounded(self._w3.eth.block_number, "block height lookup")

        except ContractLogicError as e:
            raise LedgerRejected(f"Contract rejected vote hash: {e}", tx_ref=tx_ref) from e
        except TimeExhausted as e:
            raise LedgerUnavailable("Anchor receipt not received in time", tx_ref=tx_ref) from e
        except (LedgerRejected, LedgerUnavailable):
            raise
        except Exception as e:
            raise LedgerUnavailable(f"Ledger submission failed: {e}", tx_ref=tx_ref) from e

        block_height = int(receipt["blockNumber"])
        logger.info("Anchored vote hash {}... in block {}", vote_hash[:12], block_height)

        return AnchorReceipt(
            tx_ref=tx_ref,
            block_height=block_height,
            gas_used=int(receipt["gasUsed"]),
            confirmations=max(int(head) - block_height + 1, 1),
        )

    async def query_hash(self, election_id: str, vote_hash: str) -> LedgerRecord:
        """Look up an anchored vote hash on the contract."""
        self._require_contract()
        try:
            confirmed, block_height, submitter = await self._bounded(
                self._contract.functions.validateVote(
                    election_id,
                    _hash_bytes(vote_hash),
                ).call(),
                "hash lookup"
            )
        except LedgerUnavailable:
            raise
        except Exception as e:
            raise LedgerUnavailable(f"Ledger lookup failed: {e}") from e

        return LedgerRecord(
            confirmed=bool(confirmed),
            block_height=int(block_height),
            submitter_ref=str(submitter),
        )

    async def get_vote_count(self, election_id: str) -> int:
        """Number of vote hashes the contract holds for an election."""
        self._require_contract()
        try:
            count = await self._bounded(
                self._contract.functions.getElectionVoteCount(election_id).call(),
                "vote count lookup"
            )
        except LedgerUnavailable:
            raise
        except Exception as e:
            raise LedgerUnavailable(f"Ledger vote count failed: {e}") from e
        return int(count)

    async def network_status(self) -> NetworkStatus:
        """Connectivity snapshot. Never raises; reports disconnected instead."""
        if self._w3 is None:
            return NetworkStatus(connected=False)

        try:
            block_height, gas_price, chain_id = await self._bounded(
                asyncio.gather(
                    self._w3.eth.block_number,
                    self._w3.eth.gas_price,
                    self._w3.eth.chain_id,
                ),
                "network status"
            )
        except Exception as e:
            logger.warning("Ledger network status check failed: {}", e)
            return NetworkStatus(connected=False)

        return NetworkStatus(
            connected=True,
            block_height=int(block_height),
            gas_price=str(AsyncWeb3.from_wei(gas_price, "gwei")),
            network_id=int(chain_id),
            contract_address=self.contract_address,
        )
