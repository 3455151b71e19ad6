from gradebook.services.csv_format import detect_format


def test_semicolon_majority_selects_semicolon():
    assert detect_format(b"Name;Ex1;Ex2\nAna;90;80\n").delimiter == ";"


def test_comma_header_selects_comma():
    assert detect_format(b"Name,Ex1,Ex2\nAna,90,80\n").delimiter == ","


def test_tie_selects_comma():
    assert detect_format(b"Name;Ex 1,Ex 2\n").delimiter == ","
    assert detect_format(b"Name\n").delimiter == ","


def test_only_first_line_is_sampled():
    data = b"Name,Ex1,Ex2\r\nAna;B;C;D;E;F\n"
    assert detect_format(data).delimiter == ","


def test_quote_char_is_double_quote():
    assert detect_format(b"Name;Ex1\n").quotechar == '"'


def test_bom_is_ignored():
    assert detect_format("\ufeffNombre;Ej 1;Ej 2\n".encode("utf-8")).delimiter == ";"


def test_undecodable_sample_falls_back_to_comma():
    assert detect_format(b"Name;\xff\xfe;Ex2;Ex3\n").delimiter == ","


def test_multibyte_char_cut_by_sample_boundary_is_not_an_error():
    header = ("a" + "Ñ" * 1500 + ";;;").encode("utf-8")
    # the 2048-byte cut lands in the middle of a two-byte character
    assert len(header) > 2048
    assert detect_format(header).delimiter == ","
