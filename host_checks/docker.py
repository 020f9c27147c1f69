"""Container runtime listing via the docker CLI."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import List

from core.commands import Runner, Which, has, run

LOGGER = logging.getLogger(__name__)

PS_FORMAT = "{{.Names}}\t{{.Image}}\t{{.Status}}\t{{.Ports}}"
HEADERS = ("Name", "Image", "Status", "Ports")
_HEALTHY_RE = re.compile(r"healthy|Up", re.IGNORECASE)


@dataclass(frozen=True)
class ContainerStatus:
    name: str
    image: str = ""
    status: str = ""
    ports: str = ""

    @property
    def healthy(self) -> bool:
        """Naive: the name/status pair mentions "healthy" or "Up"."""
        return bool(_HEALTHY_RE.search(f"{self.name} {self.status}"))


@dataclass
class DockerStatus:
    reachable: bool = False
    containers: List[ContainerStatus] = field(default_factory=list)

    @property
    def unhealthy(self) -> List[ContainerStatus]:
        return [c for c in self.containers if not c.healthy]

    @property
    def all_healthy(self) -> bool:
        return self.reachable and not self.unhealthy

    def mentions(self, pattern: str) -> bool:
        """Case-insensitive search over the listing text."""
        rx = re.compile(pattern, re.IGNORECASE)
        return any(rx.search(" ".join((c.name, c.image, c.status, c.ports))) for c in self.containers)

    def rows(self) -> List[List[str]]:
        return [[c.name, c.image, c.status, c.ports] for c in self.containers]


def parse_docker_ps(text: str) -> List[ContainerStatus]:
    containers: List[ContainerStatus] = []
    for line in text.splitlines():
        if not line.strip():
            continue
        fields = (line.split("\t") + ["", "", ""])[:4]
        containers.append(ContainerStatus(*fields))
    return containers


def collect_docker(runner: Runner = run, which: Which = has) -> DockerStatus:
    if not which("docker") or not runner(["docker", "ps"]).ok:
        return DockerStatus()
    res = runner(["docker", "ps", "--format", PS_FORMAT])
    status = DockerStatus(reachable=True, containers=parse_docker_ps(res.stdout))
    LOGGER.info("[docker] %d container(s), %d unhealthy",
                len(status.containers), len(status.unhealthy))
    return status
