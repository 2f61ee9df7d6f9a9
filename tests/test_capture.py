# tests/test_capture.py
import io
import unittest

from PIL import Image

from destitutes.capture import CameraSession, accept_file, encode_jpeg
from destitutes.errors import CameraUnavailable, ValidationError

from tests.fakes import FakeCamera, png_bytes


def noisy_image(size=(64, 64)) -> Image.Image:
    img = Image.new("RGB", size)
    img.putdata([((x * 37) % 256, (y * 91) % 256, ((x + y) * 13) % 256) for y in range(size[1]) for x in range(size[0])])
    return img


class TestEncode(unittest.TestCase):
    def test_jpeg_output(self):
        data = encode_jpeg(Image.new("RGBA", (10, 10), (1, 2, 3, 128)))
        self.assertEqual(Image.open(io.BytesIO(data)).format, "JPEG")

    def test_quality_affects_size(self):
        img = noisy_image()
        self.assertLess(len(encode_jpeg(img, quality=20)), len(encode_jpeg(img, quality=95)))


class TestCameraSession(unittest.TestCase):
    def test_context_manager_releases(self):
        camera = FakeCamera()
        with CameraSession(camera) as cam:
            payload = cam.capture()
            self.assertEqual(camera.streams[0].active_tracks(), 1)
        self.assertEqual(camera.streams[0].active_tracks(), 0)
        self.assertEqual(Image.open(io.BytesIO(payload.data)).size, (16, 9))

    def test_close_is_idempotent(self):
        camera = FakeCamera()
        cam = CameraSession(camera)
        cam.close()
        cam.close()
        self.assertTrue(cam.closed)
        with self.assertRaises(CameraUnavailable):
            cam.capture()

    def test_open_errors_propagate(self):
        with self.assertRaises(CameraUnavailable):
            CameraSession(FakeCamera(error=CameraUnavailable("Camera not supported in this browser")))


class TestAcceptFile(unittest.TestCase):
    def test_image_types(self):
        data = png_bytes()
        payload = accept_file("street.png", "image/png", data)
        self.assertEqual((payload.filename, payload.content_type, payload.data), ("street.png", "image/png", data))
        self.assertEqual(payload.preview, data)

    def test_rejects_non_images(self):
        for content_type in ("application/pdf", "text/plain", None, ""):
            with self.subTest(content_type=content_type), self.assertRaises(ValidationError):
                accept_file("file", content_type, b"...")

    def test_no_size_limit(self):
        self.assertEqual(len(accept_file("big.jpg", "image/jpeg", b"\0" * (12 * 1024 * 1024)).data), 12 * 1024 * 1024)


if __name__ == "__main__":
    unittest.main()
