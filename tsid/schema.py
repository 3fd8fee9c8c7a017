from pydantic import BaseModel, Field

from tsid.core.identifier import Tsid


class TsidResponse(BaseModel):
    """Response model describing one TSID.

    Args:
        tsid (str): The 13-character Crockford Base32 form.
        value (int): The packed 64-bit integer form.
        timestamp (int): Milliseconds since the factory epoch.
        node (int): The producer node number.
        sequence (int): The per-millisecond sequence.
    """

    tsid: str = Field(
        ...,
        description="13-character Crockford Base32 form",
        examples=["2NJT27V22YG00"],
    )
    value: int = Field(
        ...,
        description="Packed 64-bit integer form",
        examples=[1541815603606036480],
    )
    timestamp: int = Field(
        ...,
        description="Milliseconds since the factory epoch",
        examples=[367597485448],
    )
    node: int = Field(..., description="Producer node number", examples=[378])
    sequence: int = Field(..., description="Per-millisecond sequence", examples=[0])

    @classmethod
    def from_tsid(cls, tsid: Tsid) -> "TsidResponse":
        return cls(
            tsid=tsid.as_string(),
            value=tsid.as_int(),
            timestamp=tsid.timestamp,
            node=tsid.node,
            sequence=tsid.sequence,
        )


class TsidBatchResponse(BaseModel):
    """Response model for a batch of TSIDs.

    Args:
        tsids (list[TsidResponse]): The generated identifiers, in order.
    """

    tsids: list[TsidResponse] = Field(
        ..., description="Generated identifiers, in generation order"
    )
