from __future__ import annotations

from django.test import TestCase

from catalog.models import Brand, Category
from catalog.utils import SLUG_MAX_LENGTH, slugify_unique
from providers.models import Provider


class SlugifyUniqueTests(TestCase):
    def setUp(self) -> None:
        self.nod = Provider.objects.create(key="nod", name="NOD")
        self.elko = Provider.objects.create(key="elko", name="ELKO")

    def test_suffix_within_scope(self):
        Brand.objects.create(provider=self.nod, external_id="1", name="Asus", slug="asus")
        self.assertEqual(slugify_unique(Brand, "Asus", provider=self.nod), "asus-2")
        Brand.objects.create(provider=self.nod, external_id="2", name="Asus", slug="asus-2")
        self.assertEqual(slugify_unique(Brand, "ASUS", provider=self.nod), "asus-3")

    def test_other_provider_is_independent(self):
        Brand.objects.create(provider=self.nod, external_id="1", name="Asus", slug="asus")
        self.assertEqual(slugify_unique(Brand, "Asus", provider=self.elko), "asus")

    def test_empty_value(self):
        self.assertEqual(slugify_unique(Category, "!!!", provider=self.nod), "item")

    def test_length_cap(self):
        long_name = "Laptop " * 40
        first = slugify_unique(Category, long_name, provider=self.nod)
        self.assertLessEqual(len(first), SLUG_MAX_LENGTH)
        Category.objects.create(provider=self.nod, external_id="1", name=long_name, slug=first)
        second = slugify_unique(Category, long_name, provider=self.nod)
        self.assertLessEqual(len(second), SLUG_MAX_LENGTH)
        self.assertTrue(second.endswith("-2"))
