'''
    Description:
        - Handlers for the peer <-> server control messages.
        - Each handler gets the server Context, the sender's Link and the decoded
          frame; replies go back to the sender only.
        - Messages from a peer the registry does not know get default/empty answers.
'''

import logging

from protocol.envelopes import Answer, CountrySet, Frame, NewRemotePeerRequest, PurposeSet
from protocol.envelopes import country_detected, new_remote_peer, remote_country_set
from chatroulette.peers import safe_json_parse, sanitize_country_code, sanitize_purpose

log = logging.getLogger(__name__)


# ---------- Connection lifecycle ----------

async def handle_peer_connected(ctx, link):
    geo = ctx.locator.lookup(link.remote_ip)
    ctx.registry.add(link.peer_id, geo.country_code, geo.country_name)
    log.info("peer %s registered (%s, %s); %d online",
             link.peer_id, geo.country_code or "-", geo.country_name, ctx.registry.count())
    await link.send(country_detected(geo.country_code, geo.country_name))


async def handle_peer_disconnected(ctx, link):
    if not ctx.registry.has(link.peer_id):
        log.debug("disconnect for unknown peer %s", link.peer_id)
        return
    # the slot key comes from the registry entry, so clear before removing
    ctx.matcher.clear_waiting_data(link.peer_id)
    ctx.registry.remove(link.peer_id)
    log.info("peer %s gone; %d online", link.peer_id, ctx.registry.count())


# ---------- Control messages ----------

def _apply_match_options(ctx, peer_id: str, payload: str) -> None:
    ''' Update countryCode / purpose from a NEW_REMOTE_PEER_REQUEST payload. Absent keys keep the current value. '''
    options = safe_json_parse(payload)
    if options is None:
        return
    if not isinstance(options, dict):
        log.warning("ignoring non-object payload from %s", peer_id)
        return
    if "countryCode" in options:
        ctx.registry.set(peer_id, "country_code", sanitize_country_code(options["countryCode"]))
    if "purpose" in options:
        ctx.registry.set(peer_id, "purpose",
                         sanitize_purpose(options["purpose"], ctx.settings.allowed_purposes))


async def handle_NEW_REMOTE_PEER_REQUEST(ctx, link, frame: NewRemotePeerRequest):
    peer_id = link.peer_id
    if not ctx.registry.has(peer_id):
        log.warning("NEW_REMOTE_PEER_REQUEST from unregistered peer %s", peer_id)
        await link.send(new_remote_peer("", ""))
        return

    # release any wait under the old key before the key can change
    ctx.matcher.clear_waiting_data(peer_id)
    if frame.payload:
        _apply_match_options(ctx, peer_id, frame.payload)

    remote_id = ctx.matcher.next_peer_id(peer_id)
    remote_country = ctx.registry.get(remote_id, "country_code_detected", "")
    log.debug("NEW_REMOTE_PEER for %s -> %r", peer_id, remote_id)
    await link.send(new_remote_peer(remote_id, remote_country))


async def handle_COUNTRY_SET(ctx, link, frame: CountrySet):
    if not ctx.registry.has(link.peer_id):
        log.warning("COUNTRY_SET from unregistered peer %s", link.peer_id)
        return
    ctx.matcher.clear_waiting_data(link.peer_id)
    ctx.registry.set(link.peer_id, "country_code", sanitize_country_code(frame.payload))


async def handle_PURPOSE_SET(ctx, link, frame: PurposeSet):
    if not ctx.registry.has(link.peer_id):
        log.warning("PURPOSE_SET from unregistered peer %s", link.peer_id)
        return
    ctx.matcher.clear_waiting_data(link.peer_id)
    ctx.registry.set(link.peer_id, "purpose",
                     sanitize_purpose(frame.payload, ctx.settings.allowed_purposes))


async def handle_ANSWER(ctx, link, frame: Answer):
    # tell the caller where the peer it just reached is
    country = ctx.registry.get(frame.dst, "country_code_detected", "")
    await link.send(remote_country_set(frame.dst, country))


async def handle_unknown(ctx, link, frame: Frame):
    log.warning("unrecognized message %r from %s", frame.type, link.peer_id)
