from feedback_relay.utils.validators import clean_str, file_extension, is_allowed_media


def test_clean_str():
    assert clean_str(None) is None
    assert clean_str("   ") is None
    assert clean_str("  ACME ") == "ACME"
    assert clean_str("abcdef", max_len=3) == "abc"
    assert clean_str("linha 1\n\nlinha 2") == "linha 1\n\nlinha 2"


def test_file_extension():
    assert file_extension("Foto.JPG") == "jpg"
    assert file_extension("archive.tar.gz") == "gz"
    assert file_extension("noext") == ""
    assert file_extension(None) == ""


def test_images_and_videos_are_allowed():
    assert is_allowed_media("a.png", "image/png")
    assert is_allowed_media("a.jpeg", "image/jpeg")
    assert is_allowed_media("clip.mov", "video/quicktime")
    assert is_allowed_media("clip.avi", "video/x-msvideo")


def test_extension_and_mimetype_must_both_match():
    assert not is_allowed_media("notes.txt", "text/plain")
    assert not is_allowed_media("fake.png", "application/pdf")
    assert not is_allowed_media("image.webp", "image/webp")
    assert not is_allowed_media("noext", "image/png")


def test_custom_extension_list():
    assert not is_allowed_media("a.mp4", "video/mp4", allowed_exts=("png",))
    assert is_allowed_media("a.png", "image/png", allowed_exts=("png",))
