from __future__ import annotations

import pytest
from pydantic import ValidationError

from content.address import EntityAddress, decode, encode
from content.errors import MalformedAddress


def test_encode_joins_fields_in_fixed_order() -> None:
    address = EntityAddress(
        row_id=42,
        adapter_name="forum",
        source_table="forum_posts",
        source_field="message",
        course_id=7,
    )

    assert encode(address) == "forum:forum_posts:message:42:7"
    assert str(address) == "forum:forum_posts:message:42:7"


def test_encode_omits_missing_course_id() -> None:
    address = EntityAddress(row_id=3, adapter_name="course", source_table="course", source_field="summary")

    assert address.encode() == "course:course:summary:3"


@pytest.mark.parametrize(
    "address",
    [
        EntityAddress(row_id=1, adapter_name="course", source_table="course", source_field="summary"),
        EntityAddress(
            row_id=99,
            adapter_name="mod_forum",
            source_table="forum_posts",
            source_field="message",
            course_id=12,
        ),
        EntityAddress(row_id=0, adapter_name="a b", source_table="t", source_field="f", course_id=0),
    ],
)
def test_decode_reverses_encode(address: EntityAddress) -> None:
    assert decode(encode(address)) == address


def test_decode_reads_optional_course_id() -> None:
    with_course = decode("page:page:content:5:3")
    without_course = decode("page:page:content:5")

    assert with_course.course_id == 3
    assert without_course.course_id is None
    assert with_course.identity == without_course.identity == ("page", "page", "content", 5)


@pytest.mark.parametrize("entity_id", ["", "course", "course:course", "course:course:summary"])
def test_decode_rejects_fewer_than_four_parts(entity_id: str) -> None:
    with pytest.raises(MalformedAddress):
        decode(entity_id)


@pytest.mark.parametrize(
    "entity_id",
    [
        "course:course:summary:abc",
        "course:course:summary:1:seven",
        "::summary:1",
        ":::",
        "forum:forum_posts:message:4_2:7",
        "forum:forum_posts:message: 42 :7",
        "forum:forum_posts:message:42:+7",
        "forum:forum_posts:message:+42",
        "forum:forum_posts:message:042:7",
    ],
)
def test_decode_rejects_bad_values(entity_id: str) -> None:
    with pytest.raises(MalformedAddress):
        decode(entity_id)


def test_malformed_address_is_a_value_error() -> None:
    with pytest.raises(ValueError, match="not enough parts"):
        decode("a:b:c")


def test_names_cannot_contain_the_delimiter() -> None:
    with pytest.raises(ValidationError):
        EntityAddress(row_id=1, adapter_name="mod:forum", source_table="t", source_field="f")
