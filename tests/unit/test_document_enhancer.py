"""Unit tests for DocumentEnhancer."""

import io
import pytest
import numpy as np
from PIL import Image
from pydantic import ValidationError as PydanticValidationError
import sys
import os

# Add src directory to path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', '..', 'src'))

from enhancer.processor import DocumentEnhancer, to_8bit
from shared.exceptions import ImageDecodeError, PayloadError


class TestDocumentEnhancer:
    """Test cases for DocumentEnhancer."""

    @pytest.fixture
    def enhancer(self):
        return DocumentEnhancer()

    def test_enhance_returns_jpeg(self, enhancer, sample_capture):
        """Output is a JPEG with the input dimensions when no downscale is needed."""
        document = enhancer.enhance(sample_capture)

        assert document.content_type == 'image/jpeg'
        assert (document.width, document.height) == (300, 200)

        image = Image.open(io.BytesIO(document.data))
        assert image.format == 'JPEG'
        assert image.size == (300, 200)

    def test_enhanced_document_is_immutable(self, enhancer, sample_capture):
        """EnhancedDocument is frozen."""
        document = enhancer.enhance(sample_capture)

        with pytest.raises(PydanticValidationError):
            document.width = 10

    def test_wide_capture_downscaled_to_max_width(self, enhancer, make_capture):
        """Captures wider than 1500 are scaled to exactly 1500 preserving aspect ratio."""
        document = enhancer.enhance(make_capture(3000, 2000, fmt='JPEG'))

        assert document.width == 1500
        assert document.height == 1000

    @pytest.mark.parametrize("width,height,expected_height", [
        (1501, 1000, 999),
        (2000, 3001, 2251),
        (4032, 3024, 1125),
    ])
    def test_downscale_rounds_height(self, enhancer, width, height, expected_height):
        """Height follows the width ratio, rounded."""
        image = Image.new('RGB', (width, height), (240, 240, 240))

        scaled = enhancer.downscale(image)

        assert scaled.size == (1500, expected_height)

    def test_narrow_capture_not_upscaled(self, enhancer):
        """Captures up to 1500 wide keep their size."""
        image = Image.new('RGB', (1500, 40), (240, 240, 240))

        assert enhancer.downscale(image).size == (1500, 40)

    def test_enhance_image_does_not_modify_input(self, enhancer, make_page):
        """The decoded capture is left untouched."""
        image = Image.fromarray(make_page(60, 60))
        before = np.asarray(image).copy()

        enhancer.enhance_image(image)

        np.testing.assert_array_equal(np.asarray(image), before)

    def test_enhance_image_handles_rgba(self, enhancer):
        """Transparent PNG captures are flattened to RGB."""
        image = Image.new('RGBA', (20, 20), (240, 240, 240, 255))

        result = enhancer.enhance_image(image)

        assert result.mode == 'RGB'
        assert np.asarray(result).min() == 255

    def test_enhance_sixteen_bit_capture(self, enhancer):
        """16-bit grayscale scans keep their ink instead of clipping to white."""
        page = np.full((200, 300), 60000, dtype=np.uint16)
        page[80:120, 120:180] = 10000
        buffer = io.BytesIO()
        Image.fromarray(page).save(buffer, format='PNG')

        document = enhancer.enhance(buffer.getvalue())

        pixels = np.asarray(Image.open(io.BytesIO(document.data)).convert('L'), dtype=np.int16)
        assert pixels[10:40, 10:40].min() >= 250
        assert abs(int(pixels[100, 150]) - 11) <= 3

    def test_to_8bit_rescales_sixteen_bit(self):
        image = Image.fromarray(np.array([[0, 32768, 65535]], dtype=np.uint16))

        converted = to_8bit(image)

        assert converted.mode == 'L'
        assert np.asarray(converted).tolist() == [[0, 128, 255]]

    def test_to_8bit_leaves_eight_bit_alone(self, make_page):
        image = Image.fromarray(make_page(30, 20))

        assert to_8bit(image) is image

    def test_enhance_rejects_garbage(self, enhancer):
        """Undecodable bytes raise ImageDecodeError."""
        with pytest.raises(ImageDecodeError):
            enhancer.enhance(b'not an image')

    def test_enhance_rejects_empty(self, enhancer):
        """Empty captures raise ImageDecodeError."""
        with pytest.raises(ImageDecodeError):
            enhancer.enhance(b'')

    def test_to_pdf(self, enhancer, sample_capture):
        """Images are wrapped in a PDF."""
        pdf = enhancer.to_pdf(enhancer.enhance(sample_capture).data)

        assert pdf.startswith(b'%PDF')

    def test_to_pdf_rejects_garbage(self, enhancer):
        """PDF conversion failures are payload errors."""
        with pytest.raises(PayloadError):
            enhancer.to_pdf(b'not an image')


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
