"""Record types shared by the test modules."""

from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Callable, NewType, Optional

from typed_records import Float32, Int8, Int32, Int64, UInt8, UInt32, UInt64, tag

AliasType = NewType("AliasType", str)


@dataclass
class Ints:
    int_: int = tag("int")
    int32: Int32 = tag("int32")
    uint32: UInt32 = tag("uint32")
    int64: Int64 = tag("int64")
    uint64: UInt64 = tag("uint64")


@dataclass
class Narrow:
    small: Int8 = tag("small")
    byte: UInt8 = tag("byte")


@dataclass
class Floats:
    float32: Float32 = tag("float32")
    float64: float = tag("float64")


@dataclass
class Flag:
    flag: bool = tag("bool")


@dataclass
class Texts:
    text: str = tag("text")
    alias: AliasType = tag("alias")


@dataclass
class Maps:
    map_str_str: dict[str, str] = tag("map_str_str")
    map_int: dict[int, int] = tag("map_int")


@dataclass
class Slices:
    slice: list[int] = tag("slice")


@dataclass
class Times:
    time: datetime = tag("time")
    duration: timedelta = tag("duration")


@dataclass
class Pointer:
    text: Optional[str] = tag("text")


@dataclass
class Inner:
    int_: int = tag("int")
    int32: Int32 = tag("int32")
    uint32: UInt32 = tag("uint32")
    int64: Int64 = tag("int64")
    uint64: UInt64 = tag("uint64")
    float32: Float32 = tag("float32")
    float64: float = tag("float64")
    text: str = tag("text")
    time: datetime = tag("time")
    duration: timedelta = tag("duration")
    alias: AliasType = tag("alias")
    map_str_str: dict[str, str] = tag("map_str_str")
    map_int: dict[int, int] = tag("map_int")
    slice: list[int] = tag("slice")


@dataclass
class Outer:
    nested: Inner = tag("nested")


@dataclass
class OptionalNested:
    nested: Optional[Inner] = tag("nested")


@dataclass
class Point:
    """Record without field defaults, tagged through dataclasses.field directly."""

    x: int = field(metadata={"as": "x"})
    y: Int32 = field(metadata={"as": "y"})


@dataclass
class Shape:
    origin: Optional[Point] = tag("origin")
    points: list[Point] = tag("points")


@dataclass
class WithUntagged:
    name: str = tag("name")
    note: str = "not stored"


@dataclass
class WithCallback:
    name: str = tag("name")
    callback: Optional[Callable[[], int]] = tag("callback")


@dataclass
class Holder:
    nested: WithCallback = tag("nested")


@dataclass
class FloatKeys:
    values: dict[float, int] = tag("values")


@dataclass
class NestedMapValues:
    values: dict[str, list[int]] = tag("values")


@dataclass
class Node:
    value: int = tag("value")
    next: Optional["Node"] = tag("next")
