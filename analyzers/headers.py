from typing import List
import logging
from core.context import CollectedData
from core.signal_registry import SignalRegistry
from models.detection import Evidence
from models.signature import SignatureEntry

# Header holding the server software banner; looked up with this exact name
SERVER_HEADER = "server"

@SignalRegistry.register("header", weight=30)
class HeaderSignal:
    def __init__(self, name: str, weight: int):
        self.name = name
        self.weight = weight

    def match(self, entry: SignatureEntry, data: CollectedData) -> List[Evidence]:
        logger = logging.getLogger(__name__)
        evidence: List[Evidence] = []

        for header_name in entry.header_names:
            # Names are compared exactly as received
            if header_name in data.headers:
                logger.debug(f"HeaderSignal matched {entry.provider} on header {header_name}")
                evidence.append(
                    Evidence(
                        provider=entry.provider,
                        signal=self.name,
                        weight=self.weight,
                        message=f"Header {header_name} matches {entry.provider}",
                    )
                )
        return evidence

@SignalRegistry.register("server", weight=30)
class ServerSignal:
    def __init__(self, name: str, weight: int):
        self.name = name
        self.weight = weight

    def match(self, entry: SignatureEntry, data: CollectedData) -> List[Evidence]:
        evidence: List[Evidence] = []
        server = data.headers.get(SERVER_HEADER)
        if server is None:
            return evidence

        for token in entry.server_tokens:
            if token in server:
                logging.getLogger(__name__).debug(f"ServerSignal matched {entry.provider} on {server!r}")
                evidence.append(
                    Evidence(
                        provider=entry.provider,
                        signal=self.name,
                        weight=self.weight,
                        message=f"Server header {token} matches {entry.provider}",
                    )
                )
        return evidence
