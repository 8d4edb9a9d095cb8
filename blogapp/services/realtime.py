"""
Avisos de cambios en la colección de posts.

Un flush que toca filas de Post marca la sesión; al hacer commit se avisa a
los suscriptores, y un rollback descarta la marca. Los suscriptores no
pueden usar la sesión que acaba de hacer commit: tienen que abrir la suya.
"""
from itertools import chain

from sqlalchemy import event
from sqlalchemy.orm import Session

from blogapp.models import Post
from blogapp.utils.listeners import ListenerSet

_CHANGED_FLAG = "posts_changed"

post_changes = ListenerSet("post-changes")


@event.listens_for(Session, "after_flush")
def _mark_post_writes(session, flush_context):
    if any(isinstance(obj, Post) for obj in chain(session.new, session.dirty, session.deleted)):
        session.info[_CHANGED_FLAG] = True


@event.listens_for(Session, "after_commit")
def _announce_post_writes(session):
    if session.info.pop(_CHANGED_FLAG, False):
        post_changes.notify()


@event.listens_for(Session, "after_rollback")
def _discard_post_writes(session):
    session.info.pop(_CHANGED_FLAG, None)
