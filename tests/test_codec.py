import dns.flags
import dns.message
import dns.rdatatype
import dns.rrset
import pytest

from dnslatency.codec import DnsPythonCodec
from dnslatency.errors import ProtocolError, SerializationError


@pytest.fixture
def codec():
    return DnsPythonCodec()


def test_pack_query_builds_recursive_a_query(codec):
    message = dns.message.from_wire(codec.pack_query("example.com"))

    question = message.question[0]
    assert question.name.to_text() == "example.com."
    assert question.rdtype == dns.rdatatype.A
    assert message.flags & dns.flags.RD
    assert not message.flags & dns.flags.CD


def test_pack_query_rejects_long_label(codec):
    with pytest.raises(SerializationError):
        codec.pack_query("x" * 64 + ".example")


def test_unpack_response_counts_records_and_lists_addresses(codec):
    query = dns.message.make_query("www.example.com", dns.rdatatype.A, use_edns=0)
    response = dns.message.make_response(query)
    response.flags |= dns.flags.AA
    response.answer.append(
        dns.rrset.from_text("www.example.com.", 60, "IN", "CNAME", "example.com.")
    )
    response.answer.append(
        dns.rrset.from_text("example.com.", 120, "IN", "A", "198.51.100.7")
    )
    response.authority.append(
        dns.rrset.from_text("example.com.", 3600, "IN", "NS", "a.ns.example.", "b.ns.example.")
    )

    decoded = codec.unpack_response(response.to_wire())

    assert decoded.rcode == "NOERROR"
    assert decoded.msg_id == query.id
    assert decoded.flags.qr and decoded.flags.aa
    assert decoded.answer_count == 2
    assert decoded.authority_count == 2
    # The OPT record echoed for EDNS
    assert decoded.additional_count == 1
    assert [(a.value, a.ttl) for a in decoded.answers] == [("198.51.100.7", 120)]


def test_unpack_response_rejects_short_message(codec):
    with pytest.raises(ProtocolError):
        codec.unpack_response(b"\x12\x34")
