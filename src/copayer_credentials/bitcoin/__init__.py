"""Bitcoin primitives — BIP32 extended keys and private key encodings."""
