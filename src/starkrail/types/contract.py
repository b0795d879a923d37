"""
Contract class definitions submitted by Declare transactions.

Class hashes are computed outside the engine (by the compiler toolchain)
and supplied with the class.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from starkrail.types.felt import Felt


@dataclass(frozen=True)
class LegacyContractClass:
    """
    A Cairo 0 contract definition. Declarable with Declare v1 only.

    Attributes:
        program: Compressed, base64-encoded program
        entry_points_by_type: Entry points keyed by EXTERNAL, L1_HANDLER, CONSTRUCTOR
        class_hash: Hash of the class
        abi: Optional ABI
    """

    program: str
    entry_points_by_type: Dict[str, Any]
    class_hash: Felt
    abi: Optional[List[Any]] = None

    def to_rpc(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "program": self.program,
            "entry_points_by_type": self.entry_points_by_type,
        }
        if self.abi is not None:
            result["abi"] = self.abi
        return result


@dataclass(frozen=True)
class SierraContractClass:
    """
    A Sierra contract class. Declarable with Declare v2 and v3.

    ``compiled_class_hash`` is the hash of the matching CASM; declaring a
    Sierra class without it is an error.
    """

    sierra_program: Tuple[Felt, ...]
    contract_class_version: str
    entry_points_by_type: Dict[str, Any]
    class_hash: Felt
    compiled_class_hash: Optional[Felt] = None
    abi: str = field(default="[]")

    def to_rpc(self) -> Dict[str, Any]:
        return {
            "sierra_program": [Felt(v).hex() for v in self.sierra_program],
            "contract_class_version": self.contract_class_version,
            "entry_points_by_type": self.entry_points_by_type,
            "abi": self.abi,
        }
