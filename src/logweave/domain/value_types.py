from __future__ import annotations
from typing import NewType, Literal

Address            = NewType("Address", str)             # 0x-prefixed, lowercase, 40 hex
TopicWord          = NewType("TopicWord", str)           # 0x-prefixed, lowercase, 64 hex
EventSignatureHash = NewType("EventSignatureHash", str)  # keccak256 of canonical signature, as TopicWord
LifecycleStatus    = Literal["pending", "concluded"]
EventKind          = Literal[
    "OperatorRegistered", "OperatorDeactivated", "HTXAssigned", "HTXResponded", "StakedTo",
]
