# tests/test_models.py
import unittest

from pydantic import ValidationError as ModelError

from destitutes.models import GeoPoint, Post, UserProfile


def post(**kw):
    fields = dict(
        owner_id="u1",
        display_name="asha_r",
        image_url="https://files.example/p.jpg",
        image_path="photos/u1/1_p.jpg",
        location=GeoPoint(latitude=12.9716, longitude=77.5946),
    )
    fields.update(kw)
    return Post(**fields)


class TestGeoPoint(unittest.TestCase):
    def test_formatting(self):
        p = GeoPoint(latitude=12.9716, longitude=77.5946)
        self.assertEqual(p.geohash, "12.971600,77.594600")
        self.assertEqual(p.display(), "12.971600, 77.594600")
        self.assertEqual(p.maps_url(), "https://www.google.com/maps?q=12.9716,77.5946")


class TestPost(unittest.TestCase):
    def test_document_shape(self):
        document = post(description="by the bus stop").to_document()
        self.assertEqual(document, {
            "userId": "u1",
            "userEmail": None,
            "username": "asha_r",
            "imageURL": "https://files.example/p.jpg",
            "imagePath": "photos/u1/1_p.jpg",
            "location": {"latitude": 12.9716, "longitude": 77.5946, "geohash": "12.971600,77.594600"},
            "description": "by the bus stop",
            "isAnonymous": False,
            "status": "active",
            "likes": 0,
            "views": 0,
        })

    def test_description_limit(self):
        post(description="x" * 500)
        with self.assertRaises(ModelError):
            post(description="x" * 501)

    def test_location_required(self):
        with self.assertRaises(ModelError):
            Post(owner_id="u1", image_url="u", image_path="p")

    def test_round_trip_through_document(self):
        original = post(is_anonymous=True)
        restored = Post.from_document("abc", original.to_document())
        self.assertEqual(restored.id, "abc")
        self.assertEqual(restored.image_ref.path, "photos/u1/1_p.jpg")
        self.assertEqual(restored.display_label, "Anonymous")
        self.assertEqual(restored.display_name, "asha_r")


class TestUserProfile(unittest.TestCase):
    def test_aliases(self):
        profile = UserProfile.model_validate({"uid": "u1", "phoneNumber": "9876543210", "isProfileComplete": True})
        self.assertEqual(profile.phone_number, "9876543210")
        self.assertTrue(profile.is_profile_complete)
        self.assertEqual(profile.to_document()["phoneNumber"], "9876543210")


if __name__ == "__main__":
    unittest.main()
