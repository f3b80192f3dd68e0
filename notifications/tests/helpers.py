from unittest import mock

import fakeredis

from notifications.hub import hub


def use_fake_redis(testcase):
    """Point the shared hub at an in-memory Redis until the test ends."""
    client = fakeredis.FakeRedis()
    patcher = mock.patch.object(hub, "_client", client)
    patcher.start()
    testcase.addCleanup(patcher.stop)
    return client
