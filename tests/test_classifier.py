import pytest
from PIL import Image

from scoutlens.errors import DecodeError
from scoutlens.pipeline import ImageInput, PixelStatsClassifier, Scenario, Sentiment

from conftest import solid_image


def _input(image):
    return ImageInput.from_image(image)


def test_green_screens_are_gains():
    result = PixelStatsClassifier().classify(_input(solid_image((20, 200, 40))))

    assert result.scenario == Scenario.GAINS
    assert result.sentiment == Sentiment.BULLISH
    assert result.confidence == pytest.approx(0.85)
    assert result.green_ratio == pytest.approx(1.0)
    assert result.profile.tokens == ["SOL", "JUP", "BONK"]


def test_red_screens_are_losses():
    result = PixelStatsClassifier().classify(_input(solid_image((210, 30, 30))))

    assert result.scenario == Scenario.LOSSES
    assert result.sentiment == Sentiment.BEARISH
    assert result.confidence == pytest.approx(0.78)


def test_neutral_screens_are_portfolio():
    result = PixelStatsClassifier().classify(_input(solid_image((90, 90, 90))))

    assert result.scenario == Scenario.PORTFOLIO
    assert result.sentiment == Sentiment.NEUTRAL
    assert result.profile.tokens == ["SOL", "JUP", "BONK", "WIF"]


def test_small_green_share_stays_below_cutoff():
    image = Image.new("RGB", (100, 100), (90, 90, 90))
    image.paste((20, 200, 40), (0, 0, 100, 5))

    classifier = PixelStatsClassifier(stride=4)
    green, red = classifier.color_ratios(_input(image))

    assert green == pytest.approx(0.05)
    assert red == 0.0
    assert classifier.classify(_input(image)).scenario == Scenario.PORTFOLIO


def test_green_takes_precedence_over_red():
    image = Image.new("RGB", (100, 100), (210, 30, 30))
    image.paste((20, 200, 40), (0, 0, 100, 50))

    assert PixelStatsClassifier().classify(_input(image)).scenario == Scenario.GAINS


def test_dim_colours_do_not_count():
    result = PixelStatsClassifier(threshold=150).classify(_input(solid_image((10, 120, 10))))

    assert result.scenario == Scenario.PORTFOLIO


def test_non_raster_input_is_rejected():
    with pytest.raises(DecodeError):
        PixelStatsClassifier().classify(ImageInput(image="not-an-image", width=10, height=10))


def test_stride_must_be_positive():
    with pytest.raises(ValueError):
        PixelStatsClassifier(stride=0)
