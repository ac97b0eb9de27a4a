import time
import uuid

from django.conf import settings
from django.core.validators import MaxValueValidator, MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from articles.utils import estimate_read_time, generate_bengali_slug, make_excerpt
from users.models import User


def unique_slug(model, text, instance_pk=None, max_length=255):
    """Bengali-preserving slug for ``text``, suffixed until unique for ``model``."""
    base = generate_bengali_slug(text)[: max_length - 9] or uuid.uuid4().hex[:8]
    slug = base
    queryset = model.objects.all()
    if instance_pk:
        queryset = queryset.exclude(pk=instance_pk)
    while queryset.filter(slug=slug).exists():
        slug = f"{base}-{uuid.uuid4().hex[:8]}"
    return slug


class Category(models.Model):
    name = models.CharField(max_length=100)
    slug = models.SlugField(max_length=255, unique=True, blank=True, allow_unicode=True)
    description = models.TextField(blank=True)
    parent = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="children",
    )
    sort_order = models.IntegerField(default=0)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["sort_order", "name"]
        verbose_name_plural = "categories"

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Category, self.name, self.pk)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class Tag(models.Model):
    name = models.CharField(max_length=100, unique=True)
    slug = models.SlugField(max_length=255, unique=True, blank=True, allow_unicode=True)
    description = models.TextField(blank=True)
    usage_count = models.PositiveIntegerField(default=0)
    is_trending = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["name"]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Tag, self.name, self.pk)
        super().save(*args, **kwargs)

    def __str__(self):
        return self.name


class PublishedArticleManager(models.Manager):
    def get_queryset(self):
        return (
            super()
            .get_queryset()
            .filter(status=Article.PUBLISHED)
            .select_related("category")
        )


class Article(models.Model):
    DRAFT = "draft"
    PUBLISHED = "published"
    ARCHIVED = "archived"
    STATUS_CHOICES = [
        (DRAFT, "Draft"),
        (PUBLISHED, "Published"),
        (ARCHIVED, "Archived"),
    ]

    def get_upload_path(instance, filename):
        ext = filename.split(".")[-1]
        unique_filename = f"{uuid.uuid4().hex[:8]}_{int(time.time())}.{ext}"
        return f"article_images/{settings.ENVIRONMENT}/{unique_filename}"

    title = models.CharField(max_length=500)
    slug = models.SlugField(
        max_length=255, unique=True, blank=True, db_index=True, allow_unicode=True
    )
    excerpt = models.TextField(blank=True)
    content = models.TextField()
    image = models.ImageField(upload_to=get_upload_path, null=True, blank=True)
    image_url = models.URLField(max_length=500, null=True, blank=True)
    author = models.CharField(max_length=255, blank=True)
    category = models.ForeignKey(
        Category,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="articles",
    )
    tags = models.ManyToManyField(
        Tag, through="ArticleTag", related_name="articles", blank=True
    )
    submitter = models.ForeignKey(
        User,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="submitted_articles",
    )
    status = models.CharField(
        max_length=10, choices=STATUS_CHOICES, default=DRAFT, db_index=True
    )
    is_featured = models.BooleanField(default=False)
    view_count = models.PositiveIntegerField(default=0)
    like_count = models.PositiveIntegerField(default=0)
    # minutes
    read_time = models.PositiveIntegerField(default=1)
    published_at = models.DateTimeField(null=True, blank=True, db_index=True)
    created_at = models.DateTimeField(auto_now_add=True, db_index=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = models.Manager()
    published = PublishedArticleManager()

    class Meta:
        ordering = ["-published_at", "-created_at"]
        indexes = [
            models.Index(fields=["status", "published_at"]),
            models.Index(fields=["status", "view_count"]),
            models.Index(fields=["category", "status", "published_at"]),
        ]

    def save(self, *args, **kwargs):
        if not self.slug:
            self.slug = unique_slug(Article, self.title, self.pk)
        if not self.excerpt:
            self.excerpt = make_excerpt(self.content)
        self.read_time = estimate_read_time(self.content)
        if self.status == Article.PUBLISHED and self.published_at is None:
            self.published_at = timezone.now()
        super(Article, self).save(*args, **kwargs)

    def __str__(self):
        return self.title

    @property
    def is_published(self):
        return self.status == Article.PUBLISHED

    def get_image_url(self):
        """Return either the uploaded image URL or the external URL"""
        if self.image:
            return self.image.url
        return self.image_url or None


class ArticleTag(models.Model):
    article = models.ForeignKey(Article, on_delete=models.CASCADE)
    tag = models.ForeignKey(Tag, on_delete=models.CASCADE)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("article", "tag")


class Comment(models.Model):
    MAX_DEPTH = 3

    article = models.ForeignKey(
        Article, on_delete=models.CASCADE, related_name="comments"
    )
    user = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name="comments"
    )
    parent = models.ForeignKey(
        "self", null=True, blank=True, on_delete=models.CASCADE, related_name="replies"
    )
    content = models.TextField()
    author_name = models.CharField(max_length=255, blank=True)
    is_approved = models.BooleanField(default=True)
    is_deleted = models.BooleanField(default=False)
    like_count = models.PositiveIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self):
        return f"Comment by {self.author_name} on {self.article.title}"

    def get_depth(self):
        depth = 1
        parent = self.parent
        while parent is not None:
            depth += 1
            parent = parent.parent
        return depth

    def save(self, *args, **kwargs):
        if self.parent and self.get_depth() > self.MAX_DEPTH:
            raise ValueError("Maximum nesting depth exceeded")
        if not self.author_name and self.user:
            self.author_name = self.user.display_name
        super().save(*args, **kwargs)


class Like(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="likes")
    article = models.ForeignKey(Article, on_delete=models.CASCADE, related_name="likes")
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        unique_together = ("user", "article")


class Review(models.Model):
    article = models.ForeignKey(
        Article, on_delete=models.CASCADE, related_name="reviews"
    )
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name="reviews")
    rating = models.PositiveSmallIntegerField(
        validators=[MinValueValidator(1), MaxValueValidator(5)]
    )
    review_text = models.TextField(blank=True)
    is_approved = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        unique_together = ("article", "user")
        ordering = ["-created_at"]

    def __str__(self):
        return f"Review by {self.user.username} on {self.article.title}"


class BreakingNewsQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True).filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=timezone.now())
        )


class BreakingNews(models.Model):
    content = models.TextField()
    link = models.CharField(max_length=500, blank=True, null=True)
    is_active = models.BooleanField(default=True)
    priority = models.IntegerField(default=0)
    expires_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BreakingNewsQuerySet.as_manager()

    class Meta:
        ordering = ["-priority", "-created_at"]
        verbose_name_plural = "breaking news"

    def __str__(self):
        return self.content[:80]
