"""Division models with MPTT tree structure for provinces and districts."""

from django.db import models
from mptt.models import MPTTModel, TreeForeignKey


class Division(MPTTModel):
    """Administrative division: a province (root) or a district (child of a province)."""

    name = models.CharField(
        max_length=255,
        verbose_name="Name",
        help_text="Province or district name"
    )
    code = models.SlugField(
        max_length=64,
        unique=True,
        verbose_name="Code",
        help_text="Stable public code, e.g. 'ha-noi' or 'ha-noi-ba-dinh'"
    )
    parent = TreeForeignKey(
        'self',
        on_delete=models.CASCADE,
        null=True,
        blank=True,
        related_name='children',
        verbose_name="Parent division",
        help_text="Province for a district, empty for a province"
    )
    is_active = models.BooleanField(
        default=True,
        verbose_name="Active",
        help_text="Shown in selection lists"
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class MPTTMeta:
        order_insertion_by = ['name']

    class Meta:
        verbose_name = "Division"
        verbose_name_plural = "Divisions"
        ordering = ['tree_id', 'lft']
        indexes = [
            models.Index(fields=['parent', 'name']),
        ]

    def __str__(self):
        if self.parent:
            return f"{self.parent.name} - {self.name}"
        return self.name

    @property
    def is_province(self):
        return self.parent_id is None

    @property
    def is_district(self):
        return self.parent_id is not None
