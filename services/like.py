import logging
import uuid
from typing import Callable

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from db import get_db_session, session_commit, SessionFactory
from exceptions.like import LikeToggleException
from models.like import ActorId, GuestLikesSnapshotDTO
from repositories.like import LikeRepository
from repositories.product import ProductRepository
from utils.kv_bridge import KeyValueBridge

logger = logging.getLogger(__name__)

GUEST_ID_KEY = "guest-id"
GUEST_LIKES_KEY = "guest-likes"
GUEST_ID_PREFIX = "guest-"

LikeListener = Callable[[str], None]


def resolve_actor_identity(user_id: str | None, kv_bridge: KeyValueBridge) -> ActorId:
    """
    Resolve who likes are recorded for.

    An authenticated user id always wins. Otherwise a guest id is read from
    the key-value bridge, or generated and persisted on first use, so the
    guest keeps the same identity across reloads of this browser.
    """
    if user_id:
        return ActorId(id=user_id, is_guest=False)

    guest_id = kv_bridge.get(GUEST_ID_KEY)
    if not guest_id or not guest_id.startswith(GUEST_ID_PREFIX):
        guest_id = f"{GUEST_ID_PREFIX}{uuid.uuid4()}"
        kv_bridge.set(GUEST_ID_KEY, guest_id)
        logger.info("[Likes] Generated new guest identity")
    return ActorId(id=guest_id, is_guest=True)


class LikeReconciler:
    """
    Liked-state for the current actor, guest or authenticated.

    Remote like records are the source of truth. For guests the liked set is
    also mirrored under GUEST_LIKES_KEY so it shows up immediately after a
    reload, before load() has reached the data service.

    Guest likes are not carried over when the actor logs in.
    """

    def __init__(self,
                 kv_bridge: KeyValueBridge,
                 session_factory: SessionFactory = get_db_session,
                 user_id: str | None = None):
        self.kv_bridge = kv_bridge
        self.session_factory = session_factory
        self._listeners: list[LikeListener] = []
        self._pending: set[str] = set()
        self.actor = resolve_actor_identity(user_id, kv_bridge)
        self._liked: set[str] = self._read_guest_likes() if self.actor.is_guest else set()

    def _read_guest_likes(self) -> set[str]:
        raw = self.kv_bridge.get(GUEST_LIKES_KEY)
        if not raw:
            return set()
        try:
            snapshot = GuestLikesSnapshotDTO.model_validate_json(raw)
        except ValidationError as e:
            logger.warning(f"[Likes] Discarding unreadable guest likes ({e.error_count()} errors)")
            return set()
        return set(snapshot.product_ids)

    def _write_guest_likes(self) -> None:
        snapshot = GuestLikesSnapshotDTO(product_ids=sorted(self._liked))
        try:
            self.kv_bridge.set(GUEST_LIKES_KEY, snapshot.model_dump_json())
        except Exception:
            logger.exception("[Likes] Failed to persist guest likes")

    def subscribe(self, listener: LikeListener) -> Callable[[], None]:
        """Register a callback run with the product id after every successful toggle."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def is_liked(self, product_id: str) -> bool:
        return product_id in self._liked

    def liked_product_ids(self) -> list[str]:
        return sorted(self._liked)

    async def load(self) -> None:
        """Replace the liked set with the actor's like records from the data service."""
        actor = self.actor
        async with self.session_factory() as session:
            product_ids = await LikeRepository.get_product_ids_by_liker(actor.id, session)
        if actor != self.actor:
            return
        self._liked = set(product_ids)
        if actor.is_guest:
            self._write_guest_likes()

    async def set_user(self, user_id: str | None) -> None:
        """Switch actor after login/logout and load that actor's likes."""
        self.actor = resolve_actor_identity(user_id, self.kv_bridge)
        self._liked = self._read_guest_likes() if self.actor.is_guest else set()
        logger.info(f"[Likes] Actor switched ({'guest' if self.actor.is_guest else 'user'})")
        await self.load()

    async def toggle_like(self, product_id: str) -> bool:
        """
        Like the product if unliked, unlike it if liked.

        A toggle for a product whose previous toggle is still in flight is
        ignored. On failure the liked state is left unchanged.

        Returns:
            The liked state after the call

        Raises:
            LikeToggleException: if the data service rejects the write
        """
        if product_id in self._pending:
            return self.is_liked(product_id)

        actor = self.actor
        currently_liked = product_id in self._liked
        self._pending.add(product_id)
        try:
            async with self.session_factory() as session:
                if currently_liked:
                    deleted = await LikeRepository.delete(product_id, actor.id, session)
                    if deleted:
                        await ProductRepository.adjust_likes_count(product_id, -1, session)
                elif not await LikeRepository.exists(product_id, actor.id, session):
                    await LikeRepository.create(product_id, actor.id, session)
                    await ProductRepository.adjust_likes_count(product_id, 1, session)
                await session_commit(session)
        except SQLAlchemyError as e:
            raise LikeToggleException(product_id, actor.id, str(e)) from e
        finally:
            self._pending.discard(product_id)

        if actor != self.actor:
            # Written for the previous actor; the current actor's state is untouched
            return self.is_liked(product_id)

        if currently_liked:
            self._liked.discard(product_id)
        else:
            self._liked.add(product_id)
        if actor.is_guest:
            self._write_guest_likes()

        for listener in list(self._listeners):
            try:
                listener(product_id)
            except Exception:
                logger.exception(f"[Likes] Listener {listener!r} failed")
        return not currently_liked
