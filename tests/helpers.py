from capkit.core import Capability, Entity

PING = Capability.define("ping", "ping")


def make_pinger(entity_id, func):
    return Entity(entity_id, implementations={PING: {"ping": func}})
