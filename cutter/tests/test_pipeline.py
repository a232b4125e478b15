"""Tests for Pipeline class."""

import io
import os

import pytest
from PIL import Image

from cutter.config import build_config
from cutter.errors import RemoteError
from cutter.pipeline import Pipeline, prepare_directory


def jpeg_bytes(size=(64, 48)):
    buffer = io.BytesIO()
    Image.new('RGB', size, color='red').save(buffer, format='JPEG')
    return buffer.getvalue()


class TestPrepareDirectory:
    """Tests for prepare_directory."""

    def test_creates_directory(self, tmp_path):
        target = tmp_path / 'a' / 'b'

        prepare_directory(str(target))

        assert target.is_dir()

    def test_clean_removes_contents(self, tmp_path):
        (tmp_path / 'old.jpg').write_bytes(b'old')

        prepare_directory(str(tmp_path), clean=True)

        assert os.listdir(tmp_path) == []

    def test_without_clean_keeps_contents(self, tmp_path):
        (tmp_path / 'old.jpg').write_bytes(b'old')

        prepare_directory(str(tmp_path), clean=False)

        assert os.listdir(tmp_path) == ['old.jpg']


class TestPipeline:
    """Tests for Pipeline class."""

    def test_local_run(self, source_dir, output_dir, sorted_basenames, logger):
        config = build_config(path=source_dir, output_dir=output_dir, sizes=['200x200', '400x400'])

        result = Pipeline(config, logger=logger).run()

        assert sorted_basenames(result.sources) == ['a.jpg', 'b.jpg', 'c.jpg']
        assert len(result.outputs) == 6
        assert result.failed_count == 0
        assert result.fetch_stats is None
        assert result.publish_stats is None

    def test_local_rerun_produces_same_outputs(self, source_dir, sorted_basenames):
        """Test running twice in place neither grows the source set nor the output set."""
        config = build_config(path=source_dir, sizes=['50x50'])

        first = Pipeline(config).run()
        second = Pipeline(config).run()

        assert sorted_basenames(first.sources) == sorted_basenames(second.sources)
        assert sorted(first.outputs) == sorted(second.outputs)

    def test_plan(self, source_dir):
        config = build_config(path=source_dir, sizes=['10x10', '20x20'])

        units = Pipeline(config).plan()

        assert len(units) == 6
        assert not any(os.path.exists(u.output_path) for u in units)

    def test_missing_source_dir(self, tmp_path):
        config = build_config(path=str(tmp_path / 'missing'), output_dir=str(tmp_path / 'out'))

        with pytest.raises(OSError):
            Pipeline(config).run()

    def test_remote_requires_client(self, source_dir):
        config = build_config(path=source_dir, bucket='photos')

        with pytest.raises(ValueError):
            Pipeline(config)

    def test_fetch_transform_publish(self, fake_store, tmp_path):
        """Test the full remote round trip."""
        fake_store.objects[('photos', 'gallery/img1.jpg')] = jpeg_bytes()
        fake_store.objects[('photos', 'gallery/img2.jpg')] = jpeg_bytes((30, 90))
        fake_store.objects[('photos', 'gallery/img1_200x200px_200w.jpg')] = b'old crop'
        config = build_config(
            bucket='photos',
            prefix='gallery',
            fetch_remote=True,
            sizes=['200x200'],
            tmp_dir=str(tmp_path / 'work'),
        )

        result = Pipeline(config, s3_client=fake_store).run()

        assert sorted(os.path.basename(s) for s in result.sources) == ['img1.jpg', 'img2.jpg']
        assert result.fetch_stats.succeeded == 2
        assert result.publish_stats.succeeded == 2
        published = Image.open(io.BytesIO(fake_store.objects[('photos', 'gallery/img2_200x200px_200w.jpg')]))
        assert published.size == (200, 200)
        assert fake_store.objects[('photos', 'gallery/img1_200x200px_200w.jpg')] != b'old crop'

    def test_fetch_cleans_working_directory(self, fake_store, tmp_path):
        work = tmp_path / 'work' / 'gallery'
        work.mkdir(parents=True)
        (work / 'stale.jpg').write_bytes(b'stale')
        fake_store.objects[('photos', 'gallery/img1.jpg')] = jpeg_bytes()
        config = build_config(
            bucket='photos', prefix='gallery', fetch_remote=True,
            sizes=['20x20'], tmp_dir=str(tmp_path / 'work'),
        )

        result = Pipeline(config, s3_client=fake_store).run()

        assert [os.path.basename(s) for s in result.sources] == ['img1.jpg']
        assert not (work / 'stale.jpg').exists()

    def test_publish_failure_propagates(self, fake_store, source_dir):
        fake_store.upload_object.side_effect = RemoteError('AccessDenied')
        config = build_config(path=source_dir, bucket='photos', prefix='gallery', sizes=['20x20'])

        with pytest.raises(RemoteError):
            Pipeline(config, s3_client=fake_store).run()
