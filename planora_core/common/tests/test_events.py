from planora_core.common import events


def test_publish_runs_subscribers_in_registration_order():
    seen = []

    @events.subscribe("test.ping")
    def first(payload):
        seen.append(("first", payload["n"]))

    @events.subscribe("test.ping")
    def second(payload):
        seen.append(("second", payload["n"]))

    # re-registering is a no-op
    events.subscribe("test.ping")(first)

    events.publish("test.ping", {"n": 1})
    assert seen == [("first", 1), ("second", 1)]


def test_publish_without_subscribers_is_noop():
    events.publish("test.nobody-listens", {"n": 1})
