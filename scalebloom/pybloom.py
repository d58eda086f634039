"""Bloom Filter and Scalable Bloom Filter implementations.

This module implements two probabilistic data structures for space-efficient
set membership testing:

1. BloomFilter: Fixed-capacity filter for known dataset sizes
2. ScalableBloomFilter: Dynamically growing filter that scales automatically

Neither structure ever produces a false negative. Each BloomFilter is tuned
for one capacity/error-rate budget; the ScalableBloomFilter chains
BloomFilters with geometrically growing capacity and geometrically shrinking
error rate so the compound false positive probability stays bounded while
the data set grows.

Mathematical Foundation:
    - Optimal bit count: m = ceil(-n × ln(P) / (ln(2)²)) where n is capacity
    - Optimal hash functions: k = round((m / n) × ln(2)), at least 1
    - False positive probability: P ≈ (1 - e^(-kn/m))^k
    - Index i of a key: (h1 + i × h2) mod m (Kirsch-Mitzenmacher double hashing)

Requirements:
    - bitarray: Packed bit array storage
    - xxhash: Fast non-cryptographic 128-bit digests
"""
import logging
import math
from struct import unpack_from

import bitarray
import xxhash

from scalebloom.config import Config
from scalebloom.rwlock import ReadWriteLock

logger = logging.getLogger(__name__)

LN2_SQUARED = math.log(2) ** 2
UINT32_MASK = 0xFFFFFFFF


def optimal_num_bits(capacity, error_rate):
    """Size of the bit array (m) for ``capacity`` keys at ``error_rate``.

    m = ceil(-n × ln(P) / (ln(2)²))
    """
    return int(math.ceil(-capacity * math.log(error_rate) / LN2_SQUARED))


def optimal_num_hashes(num_bits, capacity):
    """Number of hash functions (k) minimising the false positive rate.

    k = round((m / n) × ln(2)), never less than 1.
    """
    return max(1, int(round((num_bits / capacity) * math.log(2))))


def make_hashfuncs(num_hashes, num_bits):
    """Create the index generator for a Bloom filter.

    A single 128-bit xxHash digest is computed per key. Its first two
    big-endian 32-bit words seed double hashing, so ``num_hashes`` indexes
    cost one digest regardless of ``num_hashes``.

    Args:
        num_hashes (int): Number of indexes to derive per key (k).
        num_bits (int): Size of the bit array (m); indexes fall in [0, m).

    Returns:
        tuple: A 2-tuple containing:
            - hash_maker (callable): Generator function that yields indexes
            - hashfn (callable): The underlying hash function used
    """
    hashfn = xxhash.xxh3_128

    def _hash_maker(key):
        """Yield the ``num_hashes`` bit indexes of ``key``.

        Args:
            key: The element to hash (str, a bytes-like object, or any object with __str__)

        Yields:
            int: Bit indexes in range [0, num_bits)
        """
        if isinstance(key, str):
            key = key.encode('utf-8')
        elif isinstance(key, (bytearray, memoryview)):
            key = bytes(key)
        elif not isinstance(key, bytes):
            key = str(key).encode('utf-8')

        h1, h2 = unpack_from('>II', hashfn(key).digest())
        for i in range(num_hashes):
            # 32-bit wrap-around before reducing to the array size
            yield ((h1 + i * h2) & UINT32_MASK) % num_bits

    return _hash_maker, hashfn


class BloomFilter:

    def __init__(self, capacity, error_rate=0.001):
        """Initialize a Bloom filter with specified capacity and error rate.

        The bit array size and hash count are derived from the standard
        formulas (see ``optimal_num_bits`` and ``optimal_num_hashes``) and
        never change afterwards.

        Args:
            capacity (int): Number of elements the filter is designed to hold
                while maintaining the specified error rate. Must be > 0.
            error_rate (float, optional): Target false positive probability.
                Must be between 0 and 1 (exclusive). Default is 0.001 (0.1%).

        Raises:
            ValueError: If error_rate is not in range (0, 1).
            ValueError: If capacity is not positive.

        Example:
            >>> bf = BloomFilter(capacity=1000, error_rate=0.01)
            >>> bf.add("test")
            True
            >>> "test" in bf
            True
        """
        if not (0 < error_rate < 1):
            raise ValueError("Error_Rate must be between 0 and 1.")
        if not capacity > 0:
            raise ValueError("Capacity must be > 0")

        self.error_rate = error_rate
        self.capacity = capacity
        self.num_bits = optimal_num_bits(capacity, error_rate)
        self.num_hashes = optimal_num_hashes(self.num_bits, capacity)
        self.count = 0
        self.make_hashes, self.hashfn = make_hashfuncs(self.num_hashes, self.num_bits)
        self.bitarray = bitarray.bitarray(self.num_bits, endian='little')
        self.bitarray.setall(False)
        self._lock = ReadWriteLock()

    def might_contain(self, key):
        """Test whether an element is in the Bloom filter.

        Args:
            key: The element to test for membership

        Returns:
            bool: True if the element might be in the set (with possible false
                positives), False if the element is definitely not in the set.

        Time Complexity:
            O(k) where k is the number of hash functions

        Example:
            >>> bf = BloomFilter(100, 0.01)
            >>> bf.add("apple")
            True
            >>> bf.might_contain("apple")
            True
            >>> bf.might_contain("banana")
            False
        """
        bits = self.bitarray
        with self._lock.read():
            for k in self.make_hashes(key):
                if not bits[k]:
                    return False  # Definitely not in set
            return True  # Probably in set

    def __contains__(self, key):
        return self.might_contain(key)

    def __len__(self):
        """Return the number of additions that set at least one new bit.

        Adding a key whose bits are all set already (a duplicate or a false
        positive) does not count.
        """
        return self.count

    def add(self, key):
        """Add an element to the Bloom filter.

        Sets the k bits of ``key``. Adding never fails, even past capacity;
        the false positive rate simply degrades.

        Args:
            key: The element to add

        Returns:
            bool: True if at least one bit was newly set (the element is
                probably new), False if every bit was already set (the element
                is a duplicate or collides with earlier ones).

        Example:
            >>> bf = BloomFilter(100, 0.01)
            >>> bf.add("apple")
            True
            >>> bf.add("apple")
            False
        """
        bits = self.bitarray
        newly_set = False
        with self._lock.write():
            for k in self.make_hashes(key):
                if not bits[k]:
                    bits[k] = True
                    newly_set = True
            if newly_set:
                self.count += 1
        return newly_set

    def _snapshot(self):
        with self._lock.read():
            return self.bitarray.copy(), self.count

    def copy(self):
        """Create an independent copy of this Bloom filter.

        Example:
            >>> bf1 = BloomFilter(100, 0.01)
            >>> _ = bf1.add("apple")
            >>> bf2 = bf1.copy()
            >>> _ = bf2.add("banana")
            >>> "banana" in bf1
            False
        """
        new_filter = BloomFilter(self.capacity, self.error_rate)
        new_filter.bitarray, new_filter.count = self._snapshot()
        return new_filter

    def _check_compatible(self, other, operation):
        if self.capacity != other.capacity or self.error_rate != other.error_rate:
            raise ValueError(
                "%s filters requires both filters to have both the same capacity and error rate"
                % operation)

    def union(self, other):
        """Calculate the union of two Bloom filters (bitwise OR).

        Args:
            other (BloomFilter): Filter with the same capacity and error rate.

        Returns:
            BloomFilter: A new filter holding the elements of both filters

        Raises:
            ValueError: If filters have different capacities or error rates

        Note:
            The count of the result is the larger of the two counts; overlaps
            between the filters cannot be determined.
        """
        self._check_compatible(other, "Unioning")
        new_bloom = self.copy()
        other_bits, other_count = other._snapshot()
        new_bloom.bitarray |= other_bits
        new_bloom.count = max(new_bloom.count, other_count)
        return new_bloom

    def __or__(self, other):
        return self.union(other)

    def intersection(self, other):
        """Calculate the intersection of two Bloom filters (bitwise AND).

        Due to false positives, the intersection may report elements that
        were not actually in both original sets.

        Raises:
            ValueError: If filters have different capacities or error rates
        """
        self._check_compatible(other, "Intersecting")
        new_bloom = self.copy()
        other_bits, other_count = other._snapshot()
        new_bloom.bitarray &= other_bits
        new_bloom.count = min(new_bloom.count, other_count)
        return new_bloom

    def __and__(self, other):
        return self.intersection(other)

    def __repr__(self):
        return '<BloomFilter capacity=%d error_rate=%g num_bits=%d num_hashes=%d count=%d>' % (
            self.capacity, self.error_rate, self.num_bits, self.num_hashes, self.count)


class ScalableBloomFilter:
    """A Bloom filter that automatically scales as more elements are added.

    This implementation follows the algorithm described in:
    "Scalable Bloom Filters" by Almeida et al., GLOBECOM 2007.

    Elements go into an ordered list of internal Bloom filters
    (generations). Generation i is built with:
    - capacity ceil(initial_capacity × growth_factor^i)
    - error rate initial_fp × tightening_ratio^i

    Only the newest generation receives inserts; a lookup reports a hit when
    any generation does. Because the error rates form a geometric series,
    the compound false positive probability stays below
    initial_fp / (1 - tightening_ratio) however many generations are added.

    When a new generation is created depends on the saturation policy:
    - CAPACITY: the newest filter's count has reached its capacity (default)
    - COLLISION: inserting into the newest filter set no new bit

    COLLISION is the original behaviour of this data structure. It can
    abandon a young filter after one unlucky collision, or never fire on an
    overfull one, so CAPACITY is the default; pass saturation=COLLISION to
    reproduce the original growth pattern.

    Class Attributes:
        SMALL_SET_GROWTH (int): Growth factor of 2 - slower growth, less memory
        LARGE_SET_GROWTH (int): Growth factor of 4 - faster growth
    """
    SMALL_SET_GROWTH = 2
    LARGE_SET_GROWTH = 4
    CAPACITY = 'capacity'
    COLLISION = 'collision'

    def __init__(self, initial_capacity=1000, error_rate=0.01,
                 mode=SMALL_SET_GROWTH, ratio=0.5, saturation=CAPACITY):
        """Initialize a Scalable Bloom Filter.

        No internal filter is allocated until the first ``add``.

        Args:
            initial_capacity (int, optional): Capacity of the first internal
                filter. Default is 1000.
            error_rate (float, optional): False positive probability of the
                first internal filter, in (0, 1). Default is 0.01.
            mode (float, optional): Growth factor for the capacity of each new
                filter, > 1. Default is SMALL_SET_GROWTH.
            ratio (float, optional): Tightening ratio applied to the error rate
                of each new filter, in (0, 1). Default is 0.5.
            saturation (str, optional): CAPACITY or COLLISION.

        Raises:
            InvalidTighteningRatio, InvalidGrowthFactor, InvalidInitialFP,
            InvalidInitialCapacity: If the corresponding parameter is out of
                range (all are ``ConfigError`` and ``ValueError`` subclasses).
            ValueError: If saturation is not a known policy.

        Example:
            >>> sbf = ScalableBloomFilter(initial_capacity=100, error_rate=0.01)
            >>> for i in range(1000):
            ...     sbf.add(i)
            >>> len(sbf.filters) > 1
            True
        """
        config = Config(
            initial_fp=error_rate,
            growth_factor=mode,
            tightening_ratio=ratio,
            initial_capacity=initial_capacity)
        self._setup(config, saturation)

    @classmethod
    def from_config(cls, config, saturation=CAPACITY):
        """Build a Scalable Bloom Filter from a ``Config``.

        Raises:
            ConfigError: If the configuration is invalid.
        """
        sbf = cls.__new__(cls)
        sbf._setup(config, saturation)
        return sbf

    def _setup(self, config, saturation):
        if saturation not in (self.CAPACITY, self.COLLISION):
            raise ValueError("Unknown saturation policy: %r" % (saturation,))
        self.config = config.validate()
        self.saturation = saturation
        self.filters = []
        self._lock = ReadWriteLock()

    @property
    def scale(self):
        return self.config.growth_factor

    @property
    def ratio(self):
        return self.config.tightening_ratio

    @property
    def initial_capacity(self):
        return self.config.initial_capacity

    @property
    def error_rate(self):
        return self.config.initial_fp

    def _add_filter(self):
        generation = len(self.filters)
        filter = BloomFilter(
            capacity=self.config.capacity(generation),
            error_rate=self.config.error_rate(generation))
        self.filters.append(filter)
        logger.debug(
            "Created generation %d: capacity=%d error_rate=%g num_bits=%d num_hashes=%d",
            generation, filter.capacity, filter.error_rate,
            filter.num_bits, filter.num_hashes)
        return filter

    def might_contain(self, key):
        """Test whether an element is in the Scalable Bloom filter.

        Checks every generation, oldest first, and stops at the first hit.

        Args:
            key: The element to test for membership

        Returns:
            bool: True if element might be in the set, False if definitely not

        Time Complexity:
            O(k × n) where k is hash functions per filter and n is number of
            internal filters.

        Example:
            >>> sbf = ScalableBloomFilter()
            >>> sbf.add("test")
            >>> "test" in sbf
            True
            >>> "not_added" in sbf
            False
        """
        with self._lock.read():
            for f in self.filters:
                if key in f:
                    return True
            return False

    def __contains__(self, key):
        return self.might_contain(key)

    def add(self, key):
        """Add an element to the Scalable Bloom filter.

        Creates a new, larger and tighter internal filter when the newest one
        is saturated, then inserts into the newest filter.

        Args:
            key: The element to add
        """
        with self._lock.write():
            if not self.filters:
                self._add_filter().add(key)
            elif self.saturation == self.CAPACITY:
                filter = self.filters[-1]
                if filter.count >= filter.capacity:
                    filter = self._add_filter()
                filter.add(key)
            elif not self.filters[-1].add(key):
                # No new bit set: treat the newest filter as full
                self._add_filter().add(key)

    def union(self, other):
        """Calculate the union of two Scalable Bloom filters.

        Corresponding generations are unioned bitwise; generations present in
        only one of the filters are copied over.

        Args:
            other (ScalableBloomFilter): Filter with the same configuration
                and saturation policy.

        Returns:
            ScalableBloomFilter: A new filter representing the union

        Raises:
            ValueError: If filters have incompatible parameters
        """
        if self.config != other.config or self.saturation != other.saturation:
            raise ValueError("Unioning two scalable bloom filters requires "
                             "both filters to have the same configuration")

        with self._lock.read():
            mine = list(self.filters)
        with other._lock.read():
            theirs = list(other.filters)

        if len(mine) < len(theirs):
            mine, theirs = theirs, mine

        new_sbf = ScalableBloomFilter.from_config(self.config, self.saturation)
        for i, f in enumerate(mine):
            new_sbf.filters.append(f | theirs[i] if i < len(theirs) else f.copy())
        return new_sbf

    def __or__(self, other):
        return self.union(other)

    @property
    def capacity(self):
        """Total designed capacity across all internal filters."""
        return sum(f.capacity for f in self.filters)

    @property
    def count(self):
        """Alias for len()."""
        return len(self)

    def __len__(self):
        """Return the total number of elements across all internal filters."""
        return sum(f.count for f in self.filters)

    def __repr__(self):
        return '<ScalableBloomFilter generations=%d count=%d capacity=%d %r>' % (
            len(self.filters), len(self), self.capacity, self.config)


if __name__ == "__main__":
    import doctest

    doctest.testmod()
