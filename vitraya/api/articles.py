from datetime import datetime

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel
from sqlalchemy.orm import Session

from vitraya.db.models import Article
from vitraya.db.session import get_db

router = APIRouter(prefix="/articles", tags=["articles"])


class ArticleResponse(BaseModel):
    id: int
    title: str
    category: str
    read_time: str
    content: str
    author: str
    published_at: datetime


def article_response(row: Article) -> ArticleResponse:
    return ArticleResponse(
        id=row.id,
        title=row.title,
        category=row.category,
        read_time=row.read_time,
        content=row.content,
        author=row.author,
        published_at=row.published_at,
    )


def list_article_rows(db: Session, limit: int) -> list[Article]:
    return db.query(Article).order_by(Article.id.asc()).limit(limit).all()


@router.get("", response_model=list[ArticleResponse])
def list_articles(limit: int = Query(default=10, ge=1, le=50), db: Session = Depends(get_db)) -> list[ArticleResponse]:
    return [article_response(row) for row in list_article_rows(db, limit)]
