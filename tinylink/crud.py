import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from tinylink import codes, models, schemas
from tinylink.errors import Conflict, NotFound
from tinylink.urls import normalize_url

logger = logging.getLogger("tinylink")


def code_exists(db: Session, code: str) -> bool:
    return db.query(models.Link.id).filter_by(code=code).first() is not None

def create_link(db: Session, link_in: schemas.LinkCreate) -> models.Link:
    target_url = normalize_url(link_in.long_url)
    code = codes.allocate_code(lambda c: code_exists(db, c), link_in.custom_code)
    link = models.Link(code=code, target_url=target_url, total_clicks=0, last_clicked_time=None)
    db.add(link)
    try:
        db.commit()
    except IntegrityError:
        # lost the race between the existence check and the insert
        db.rollback()
        logger.warning("Code %s taken concurrently", code)
        raise Conflict()
    db.refresh(link)
    return link

def get_link(db: Session, code: str) -> models.Link:
    link = db.query(models.Link).filter_by(code=code).first()
    if not link:
        raise NotFound()
    return link

def get_links(db: Session) -> list[models.Link]:
    return db.query(models.Link).order_by(models.Link.id).all()

def count_links(db: Session) -> int:
    return db.query(models.Link).count()

def delete_link(db: Session, code: str) -> None:
    deleted = db.query(models.Link).filter_by(code=code).delete(synchronize_session=False)
    db.commit()
    if not deleted:
        raise NotFound()

def record_click(db: Session, code: str, clicked_at: datetime | None = None) -> str:
    """Resolve ``code`` and count one click; returns the target URL.

    The counter is bumped in place by the database, so concurrent
    redirects of the same code never lose an increment.
    """
    target_url = db.query(models.Link.target_url).filter_by(code=code).scalar()
    if target_url is None:
        raise NotFound()
    updated = (
        db.query(models.Link)
        .filter_by(code=code)
        .update(
            {
                models.Link.total_clicks: models.Link.total_clicks + 1,
                models.Link.last_clicked_time: clicked_at or datetime.now(timezone.utc),
            },
            synchronize_session=False,
        )
    )
    db.commit()
    if not updated:
        # deleted between lookup and update
        raise NotFound()
    return target_url
