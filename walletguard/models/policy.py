"""Transaction policy documents.

Criteria form a closed union discriminated by ``type``; an unknown
discriminator is rejected when the document is validated. Field names are
snake_case in Python and camelCase on the wire (``ethValue``, ``changeCents``).
"""

from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StringConstraints

ComparisonOperator = Literal[">", ">=", "<", "<=", "=="]
MembershipOperator = Literal["in", "not in"]
Network = Literal["base", "base-sepolia", "ethereum", "polygon"]
StandardAbi = Literal["erc20", "erc721", "erc1155"]

WeiString = Annotated[str, StringConstraints(pattern=r"^[0-9]+$")]
AddressString = Annotated[str, StringConstraints(pattern=r"^0x[a-fA-F0-9]{40}$")]
Description = Annotated[str, StringConstraints(pattern=r"^[A-Za-z0-9 ,.]{1,50}$")]


class _Document(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class EthValueCriterion(_Document):
    type: Literal["ethValue"]
    eth_value: WeiString = Field(alias="ethValue")
    operator: ComparisonOperator


class EvmAddressCriterion(_Document):
    type: Literal["evmAddress"]
    addresses: list[AddressString] = Field(max_length=300)
    operator: MembershipOperator


class EvmNetworkCriterion(_Document):
    type: Literal["evmNetwork"]
    networks: list[Network]
    operator: MembershipOperator


class NetUSDChangeCriterion(_Document):
    type: Literal["netUSDChange"]
    change_cents: StrictInt = Field(alias="changeCents", ge=0)
    operator: ComparisonOperator


class EvmDataParam(_Document):
    name: Annotated[str, StringConstraints(min_length=1)]
    operator: Literal["in", "not in", ">", ">=", "<", "<=", "=="]
    values: Optional[list[str]] = None
    value: Optional[str] = None


class EvmDataCondition(_Document):
    function: Annotated[str, StringConstraints(min_length=1)]
    params: Optional[list[EvmDataParam]] = None


class EvmDataCriterion(_Document):
    type: Literal["evmData"]
    abi: Union[StandardAbi, list[Any]]
    conditions: list[EvmDataCondition] = Field(min_length=1)


Criterion = Annotated[
    Union[
        EthValueCriterion,
        EvmAddressCriterion,
        EvmNetworkCriterion,
        EvmDataCriterion,
        NetUSDChangeCriterion,
    ],
    Field(discriminator="type"),
]


class Rule(_Document):
    action: Literal["accept", "reject"]
    operation: Literal["sendEvmTransaction"]
    criteria: list[Criterion] = Field(min_length=1, max_length=10)


class Policy(_Document):
    scope: Literal["project", "account"]
    description: Optional[Description] = None
    rules: list[Rule] = Field(min_length=1, max_length=10)


DEFAULT_POLICY_ID = "default"

DEFAULT_POLICY_DOCUMENT = {
    "scope": "project",
    "description": "Base security policy",
    "rules": [
        {
            "action": "accept",
            "operation": "sendEvmTransaction",
            "criteria": [
                {"type": "evmNetwork", "networks": ["base", "base-sepolia"], "operator": "in"},
                {"type": "netUSDChange", "changeCents": 100000, "operator": "<="},  # $1000
            ],
        },
        {
            "action": "reject",
            "operation": "sendEvmTransaction",
            "criteria": [
                {"type": "ethValue", "ethValue": "1000000000000000000", "operator": ">"},  # 1 ETH
            ],
        },
    ],
}
