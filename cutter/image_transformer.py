"""
ImageTransformer - Resize-to-fill transformation of a single image.
"""

import io
import logging
from typing import Optional

from PIL import Image, ImageOps, UnidentifiedImageError

from .config import CropSpec
from .errors import DecodeFailed, EncodeFailed, TransformError


class ImageTransformer:
    """
    Produces exact-size crops from source images using Pillow.

    Images are scaled so the shorter side matches the target and the longer
    side is center-cropped, so the output always has exactly the requested
    dimensions.
    """

    OUTPUT_FORMAT = 'JPEG'
    EXTENSION = 'jpg'
    CONTENT_TYPE = 'image/jpeg'

    def __init__(
        self,
        quality: int = 85,
        resample: Image.Resampling = Image.Resampling.BILINEAR,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize image transformer.

        Args:
            quality: JPEG quality for output (default: 85)
            resample: Resampling filter (default: bilinear/triangle)
            logger: Optional logger instance
        """
        self.quality = quality
        self.resample = resample
        self.logger = logger or logging.getLogger(__name__)

    def transform(self, source: str, spec: CropSpec) -> Image.Image:
        """
        Decode a source file and resize-to-fill it to spec.

        Args:
            source: Path to the source image
            spec: Target geometry

        Returns:
            RGB image of exactly spec.width x spec.height

        Raises:
            DecodeFailed: If the source cannot be read or decoded, or exceeds
                Pillow's decompression bomb limit
            TransformError: If the decoded image cannot be resized
        """
        try:
            with Image.open(source) as img:
                img.load()
                img = ImageOps.exif_transpose(img)
                img = self._convert_color_mode(img)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as e:
            raise DecodeFailed(source, str(e)) from e

        try:
            return ImageOps.fit(
                img,
                (spec.width, spec.height),
                method=self.resample,
                centering=(0.5, 0.5)
            )
        except (OSError, ValueError) as e:
            raise TransformError(source, f"resize to {spec} failed: {e}") from e

    def encode(self, image: Image.Image, source: str = '') -> bytes:
        """
        Serialize an image in the output format.

        Raises:
            EncodeFailed: If Pillow cannot write the image
        """
        output = io.BytesIO()
        try:
            image.save(output, format=self.OUTPUT_FORMAT, quality=self.quality, optimize=True)
        except (OSError, ValueError, KeyError) as e:
            raise EncodeFailed(source, str(e)) from e
        return output.getvalue()

    def save(self, image: Image.Image, path: str, source: str = '') -> int:
        """
        Encode image and write it to path.

        Returns:
            Number of bytes written

        Raises:
            EncodeFailed: If the image cannot be serialized
            OSError: If the file cannot be written
        """
        data = self.encode(image, source)
        with open(path, 'wb') as f:
            f.write(data)
        return len(data)

    def _convert_color_mode(self, img: Image.Image) -> Image.Image:
        """Convert image to RGB, flattening transparency onto white."""
        if img.mode in ('RGBA', 'LA'):
            background = Image.new('RGB', img.size, (255, 255, 255))
            if img.mode == 'LA':
                img = img.convert('RGBA')
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode == 'P':
            img = img.convert('RGBA')
            background = Image.new('RGB', img.size, (255, 255, 255))
            background.paste(img, mask=img.split()[-1])
            return background
        elif img.mode != 'RGB':
            return img.convert('RGB')
        return img.copy()
