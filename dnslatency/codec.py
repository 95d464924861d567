"""
DNS wire codec boundary.

The probe engine only needs two operations from a DNS library: pack an
address query into bytes and unpack response bytes into the decoded
fields it reports. ``WireCodec`` describes that boundary and
``DnsPythonCodec`` implements it with dnspython.
"""

from dataclasses import dataclass, field
from typing import Protocol

import dns.exception
import dns.flags
import dns.message
import dns.name
import dns.rcode
import dns.rdatatype

from .errors import ProtocolError, SerializationError
from .models import Answer, HeaderFlags


@dataclass
class DecodedResponse:
    """Fields of a response message the engine reports."""
    rcode: str
    msg_id: int
    flags: HeaderFlags
    answer_count: int
    authority_count: int
    additional_count: int
    answers: list[Answer] = field(default_factory=list)


class WireCodec(Protocol):
    """Encode queries and decode responses."""

    def pack_query(self, qname: str) -> bytes:
        ...

    def unpack_response(self, wire: bytes) -> DecodedResponse:
        ...


def _count_records(section: list) -> int:
    # dnspython groups records into RRsets; the header counts records.
    return sum(len(rrset) for rrset in section)


class DnsPythonCodec:
    """WireCodec backed by dnspython."""

    def build_query(self, qname: str) -> dns.message.Message:
        """Create an A query for the fully qualified ``qname``."""
        name = dns.name.from_text(qname)
        message = dns.message.make_query(name, dns.rdatatype.A)
        message.flags |= dns.flags.RD
        message.flags &= ~dns.flags.CD
        return message

    def pack_query(self, qname: str) -> bytes:
        try:
            return self.build_query(qname).to_wire()
        except (dns.exception.DNSException, ValueError) as e:
            raise SerializationError(
                f"cannot pack query for {qname!r}: {e}", qname=qname
            ) from e

    def unpack_response(self, wire: bytes) -> DecodedResponse:
        try:
            response = dns.message.from_wire(wire)
        except (dns.exception.DNSException, ValueError) as e:
            raise ProtocolError(f"cannot unpack response: {e}") from e

        flags = response.flags
        answers = [
            Answer(value=rdata.address, ttl=rrset.ttl)
            for rrset in response.answer
            if rrset.rdtype == dns.rdatatype.A
            for rdata in rrset
        ]

        additional = _count_records(response.additional)
        if response.edns >= 0:
            # The OPT pseudo-record is kept off the additional section.
            additional += 1

        return DecodedResponse(
            rcode=dns.rcode.to_text(response.rcode()),
            msg_id=response.id,
            flags=HeaderFlags(
                qr=bool(flags & dns.flags.QR),
                aa=bool(flags & dns.flags.AA),
                tc=bool(flags & dns.flags.TC),
                rd=bool(flags & dns.flags.RD),
                ra=bool(flags & dns.flags.RA),
                ad=bool(flags & dns.flags.AD),
                cd=bool(flags & dns.flags.CD),
            ),
            answer_count=_count_records(response.answer),
            authority_count=_count_records(response.authority),
            additional_count=additional,
            answers=answers,
        )
