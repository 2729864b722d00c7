from lvtakeoff.decoding.decoder import DecodeResult, ResponseDecoder, empty_result

__all__ = ["DecodeResult", "ResponseDecoder", "empty_result"]
