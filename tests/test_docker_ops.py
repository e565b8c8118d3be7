import pytest
from docker.errors import DockerException

from dockerfu.docker_ops import DockerContainerLister
from dockerfu.errors import ListError
from dockerfu.models import ContainerDescriptor, PortBinding
from dockerfu.settings import Settings

RAW = [
    {
        "Id": "8dfafdbc3a40",
        "Names": ["/boring_feynman"],
        "Image": "frozenridge/foo:latest",
        "Status": "Up 2 hours",
        "Ports": [
            {"PrivatePort": 22, "Type": "tcp"},
            {"IP": "0.0.0.0", "PrivatePort": 8080, "PublicPort": 9001, "Type": "tcp"},
        ],
    },
    {"Id": "9cd87474be90", "Image": "redis", "Status": "Up 5 days", "Ports": None},
]


class FakeAPI:
    def __init__(self, raw=None, error=None):
        self.raw = raw or []
        self.error = error
        self.closed = False

    def containers(self):
        if self.error:
            raise self.error
        return self.raw

    def close(self):
        self.closed = True


def test_list_converts_api_payload():
    lister = DockerContainerLister(Settings(), client=FakeAPI(RAW))

    containers = lister.list()

    assert containers[0] == ContainerDescriptor(
        id="8dfafdbc3a40",
        image="frozenridge/foo:latest",
        ports=(
            PortBinding(private_port=22, public_port=0, ip="", type="tcp"),
            PortBinding(private_port=8080, public_port=9001, ip="0.0.0.0", type="tcp"),
        ),
        status="Up 2 hours",
        names=("/boring_feynman",),
    )
    assert containers[1].ports == ()


def test_docker_errors_become_list_errors():
    lister = DockerContainerLister(Settings(), client=FakeAPI(error=DockerException("socket gone")))
    with pytest.raises(ListError, match="socket gone"):
        lister.list()


def test_close_closes_client():
    api = FakeAPI()
    lister = DockerContainerLister(Settings(), client=api)
    lister.close()
    assert api.closed is True
