from .field import Field

GOLDILOCKS_PRIME = 2**64 - 2**32 + 1
BABY_BEAR_PRIME = 2**31 - 2**27 + 1
KOALA_BEAR_PRIME = 2**31 - 2**24 + 1
MERSENNE31_PRIME = 2**31 - 1

GOLDILOCKS_2 = Field.from_prime("Goldilocks", GOLDILOCKS_PRIME, 2)
GOLDILOCKS_3 = Field.from_prime("Goldilocks", GOLDILOCKS_PRIME, 3)
BABY_BEAR_4 = Field.from_prime("BabyBear", BABY_BEAR_PRIME, 4)
KOALA_BEAR_4 = Field.from_prime("KoalaBear", KOALA_BEAR_PRIME, 4)
MERSENNE31_4 = Field.from_prime("Mersenne31", MERSENNE31_PRIME, 4)

FIELD_PRESETS = {
    "goldilocks-2": GOLDILOCKS_2,
    "goldilocks-3": GOLDILOCKS_3,
    "babybear-4": BABY_BEAR_4,
    "koalabear-4": KOALA_BEAR_4,
    "mersenne31-4": MERSENNE31_4,
}

DEFAULT_DIGEST_SIZE_BITS = 256
MAX_OOD_SAMPLES = 64
