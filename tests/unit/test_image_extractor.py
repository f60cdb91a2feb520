"""
Unit tests for candidate image extraction.
"""
from image_resolver.services.image_extractor import (
    collect_image_references,
    extract_candidate_image,
    image_filename,
    is_acceptable_candidate,
    number_filename_pattern,
    strip_revision_transform,
)

CDN = 'https://static.wikia.nocookie.net/numberblocks/images'


def img(src, **attrs):
    extra = ''.join(f' {key.replace("_", "-")}="{value}"' for key, value in attrs.items())
    return f'<img src="{src}"{extra}>'


class TestStripRevisionTransform:
    """Test suite for thumbnail transform stripping."""

    def test_scale_to_width_down(self):
        url = f'{CDN}/a/ab/One.png/revision/latest/scale-to-width-down/180?cb=123'
        assert strip_revision_transform(url) == f'{CDN}/a/ab/One.png/revision/latest?cb=123'

    def test_smart_width_height(self):
        url = f'{CDN}/a/ab/One.png/revision/latest/smart/width/40/height/30'
        assert strip_revision_transform(url) == f'{CDN}/a/ab/One.png/revision/latest'

    def test_untransformed_url_unchanged(self):
        url = f'{CDN}/a/ab/One.png/revision/latest?cb=1'
        assert strip_revision_transform(url) == url


class TestCandidateFiltering:
    """Test suite for reference collection and filtering."""

    def test_collects_data_src_over_placeholder_src(self):
        """Test lazy-loaded images use data-src and skip data URIs."""
        html = img('data:image/gif;base64,R0lGOD', data_src=f'{CDN}/1/10/Ten.png')
        assert collect_image_references(html) == [f'{CDN}/1/10/Ten.png']

    def test_protocol_relative_and_entities(self):
        """Test protocol-relative URLs and HTML entities are normalised."""
        html = img('//static.wikia.nocookie.net/numberblocks/images/x/One.png?a=1&amp;b=2')
        assert collect_image_references(html) == [
            'https://static.wikia.nocookie.net/numberblocks/images/x/One.png?a=1&b=2'
        ]

    def test_rejects_foreign_host(self):
        assert not is_acceptable_candidate(
            'https://evil.example.com/5.png', ['static.wikia.nocookie.net']
        )

    def test_accepts_subdomain_of_allowed_host(self):
        assert is_acceptable_candidate(
            'https://vignette.static.wikia.nocookie.net/x/5.png',
            ['static.wikia.nocookie.net']
        )

    def test_rejects_denylisted_names(self):
        for name in ('Site-logo.png', 'Favicon.ico', 'Wiki-wordmark.png', 'Avatar_5.png'):
            assert not is_acceptable_candidate(f'{CDN}/a/{name}', ['static.wikia.nocookie.net'])

    def test_image_filename_ignores_revision(self):
        assert image_filename(f'{CDN}/a/ab/1%2C000.png/revision/latest?cb=1') == '1,000.png'


class TestNumberFilenamePattern:
    """Test suite for standalone number matching."""

    def test_matches_standalone_digits(self):
        pattern = number_filename_pattern(5)
        assert pattern.search('Numberblock_5.png')
        assert not pattern.search('Numberblock_15.png')
        assert not pattern.search('Numberblock_50.png')

    def test_matches_with_and_without_separators(self):
        pattern = number_filename_pattern(1000)
        assert pattern.search('1000.png')
        assert pattern.search('1,000.png')
        assert not pattern.search('21,000.png')
        assert not pattern.search('1,000,000.png')


class TestExtractCandidateImage:
    """Test suite for extract_candidate_image."""

    def test_prefers_numeric_filename(self):
        """Test an image named with the number wins over earlier images."""
        html = (
            img(f'{CDN}/a/aa/Title_card.png')
            + img(f'{CDN}/b/bb/Numberblock_7.png/revision/latest/scale-to-width-down/250')
        )
        assert extract_candidate_image(html, 7) == \
            f'{CDN}/b/bb/Numberblock_7.png/revision/latest'

    def test_rejects_favicon_containing_number(self):
        """Test a favicon is rejected even when it contains the number."""
        html = img(f'{CDN}/f/ff/favicon_42.png')
        assert extract_candidate_image(html, 42) is None

    def test_infobox_fallback(self):
        """Test the portable infobox image is used for numbers up to 1000."""
        html = (
            '<figure class="pi-item pi-image">'
            f'<a href="#">{img(CDN + "/c/cc/Character.png/revision/latest/scale-to-width-down/268")}</a>'
            '</figure>'
        )
        assert extract_candidate_image(html, 3) == f'{CDN}/c/cc/Character.png/revision/latest'

    def test_thumbnail_container_fallback(self):
        """Test the image-thumbnail container is used for numbers up to 1000."""
        html = f'<a class="image image-thumbnail" href="#">{img(CDN + "/d/dd/Pic.png")}</a>'
        assert extract_candidate_image(html, 12) == f'{CDN}/d/dd/Pic.png'

    def test_infobox_skips_denylisted_image(self):
        """Test a denylisted infobox image is not returned."""
        html = f'<figure class="pi-image">{img(CDN + "/e/ee/Placeholder.png")}</figure>'
        assert extract_candidate_image(html, 3) is None

    def test_word_form_fallback(self):
        """Test a file named after the word form is found case-insensitively."""
        html = img(f'{CDN}/a/aa/Some_art.png') + img(f'{CDN}/b/bb/twenty_one.png')
        assert extract_candidate_image(html, 21) == f'{CDN}/b/bb/twenty_one.png'

    def test_template_rules_not_used_above_one_thousand(self):
        """Test large numbers only match by numeric filename."""
        html = f'<figure class="pi-image">{img(CDN + "/c/cc/Character.png")}</figure>'
        assert extract_candidate_image(html, 10000) is None

    def test_large_number_with_separators(self):
        """Test large numbers match filenames with thousands separators."""
        html = img(f'{CDN}/1/11/10%2C000.png/revision/latest/scale-to-width-down/180')
        assert extract_candidate_image(html, 10000) == f'{CDN}/1/11/10%2C000.png/revision/latest'

    def test_empty_document(self):
        assert extract_candidate_image('', 1) is None
