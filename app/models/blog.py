from sqlalchemy import Column, Integer, String, Boolean, DateTime, ForeignKey, Text
from sqlalchemy.ext.associationproxy import association_proxy
from sqlalchemy.orm import relationship
from core.database import Base
from core.dates import utcnow


class BlogPost(Base):
    __tablename__ = "blog_posts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(255), unique=True, nullable=False, index=True)
    excerpt = Column(String(500), nullable=False)
    content = Column(Text, nullable=False)
    cover_image = Column(Text, default="", nullable=False)
    author_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    is_published = Column(Boolean, default=False, nullable=False, index=True)
    published_at = Column(DateTime(timezone=True), nullable=True, index=True)  # primera publicación
    views = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Relaciones
    author = relationship("User", back_populates="blog_posts")
    tag_links = relationship(
        "BlogPostTag",
        back_populates="post",
        cascade="all, delete-orphan",
        order_by="BlogPostTag.id",
        lazy="selectin"
    )

    # post.tags = ["regalos", "empresas"]
    tags = association_proxy("tag_links", "tag", creator=lambda tag: BlogPostTag(tag=tag))


class BlogPostTag(Base):
    __tablename__ = "blog_post_tags"

    id = Column(Integer, primary_key=True, autoincrement=True)
    post_id = Column(Integer, ForeignKey("blog_posts.id", ondelete="CASCADE"), nullable=False, index=True)
    tag = Column(String(50), nullable=False, index=True)

    post = relationship("BlogPost", back_populates="tag_links")
