"""Declarations of the PHP built-ins that user code most often refers to.

A scanned file extends Exception, implements Countable or uses PHP_EOL in a
default value; seeding the symbol table with these names lets the hierarchy
and constant values resolve. The stubs are plain PHP parsed like any file.
"""

from __future__ import annotations

from functools import lru_cache

from .declarations import FileDeclarations
from .php_parser import PhpParser

BUILTINS_PATH = "<builtins>"

_STUBS = r"""<?php
const PHP_EOL = "\n";
const PHP_INT_MAX = 9223372036854775807;
const PHP_INT_MIN = -9223372036854775807 - 1;
const PHP_INT_SIZE = 8;
const PHP_FLOAT_EPSILON = 2.220446049250313E-16;
const PHP_FLOAT_MAX = 1.7976931348623157E+308;
const PHP_FLOAT_MIN = 2.2250738585072014E-308;
const PHP_FLOAT_DIG = 15;
const INF = 1.0E+1000;
const NAN = INF - INF;
const PHP_VERSION = '8.3.0';
const PHP_MAJOR_VERSION = 8;
const PHP_OS = 'Linux';
const PHP_OS_FAMILY = 'Linux';
const DIRECTORY_SEPARATOR = '/';
const PATH_SEPARATOR = ':';
const M_PI = 3.141592653589793;
const M_E = 2.718281828459045;
const M_SQRT2 = 1.4142135623730951;
const E_ERROR = 1;
const E_WARNING = 2;
const E_PARSE = 4;
const E_NOTICE = 8;
const E_USER_ERROR = 256;
const E_USER_WARNING = 512;
const E_USER_NOTICE = 1024;
const E_STRICT = 2048;
const E_DEPRECATED = 8192;
const E_USER_DEPRECATED = 16384;
const E_ALL = 32767;
const SORT_REGULAR = 0;
const SORT_NUMERIC = 1;
const SORT_STRING = 2;
const SORT_FLAG_CASE = 8;
const COUNT_NORMAL = 0;
const COUNT_RECURSIVE = 1;
const ENT_QUOTES = 3;
const JSON_HEX_TAG = 1;
const JSON_UNESCAPED_SLASHES = 64;
const JSON_PRETTY_PRINT = 128;
const JSON_UNESCAPED_UNICODE = 256;
const JSON_THROW_ON_ERROR = 4194304;
const LOCK_SH = 1;
const LOCK_EX = 2;
const LOCK_UN = 3;

function strlen(string $string): int {}
function count(Countable|array $value, int $mode = COUNT_NORMAL): int {}
function sprintf(string $format, mixed ...$values): string {}
function implode(array|string $separator, ?array $array = null): string {}
function explode(string $separator, string $string, int $limit = PHP_INT_MAX): array {}
function array_map(?callable $callback, array $array, array ...$arrays): array {}
function array_filter(array $array, ?callable $callback = null, int $mode = 0): array {}
function array_keys(array $array, mixed $filter_value = null, bool $strict = false): array {}
function in_array(mixed $needle, array $haystack, bool $strict = false): bool {}
function json_encode(mixed $value, int $flags = 0, int $depth = 512): string|false {}
function json_decode(string $json, ?bool $associative = null, int $depth = 512, int $flags = 0): mixed {}
function define(string $constant_name, mixed $value, bool $case_insensitive = false): bool {}
function defined(string $constant_name): bool {}
function function_exists(string $function): bool {}
function class_exists(string $class, bool $autoload = true): bool {}
function is_array(mixed $value): bool {}
function is_string(mixed $value): bool {}
function var_export(mixed $value, bool $return = false): ?string {}

interface Stringable
{
    public function __toString(): string;
}

interface Traversable
{
}

interface Iterator extends Traversable
{
    public function current(): mixed;
    public function next(): void;
    public function key(): mixed;
    public function valid(): bool;
    public function rewind(): void;
}

interface IteratorAggregate extends Traversable
{
    public function getIterator(): Iterator;
}

interface ArrayAccess
{
    public function offsetExists(mixed $offset): bool;
    public function offsetGet(mixed $offset): mixed;
    public function offsetSet(mixed $offset, mixed $value): void;
    public function offsetUnset(mixed $offset): void;
}

interface Countable
{
    public function count(): int;
}

interface JsonSerializable
{
    public function jsonSerialize(): mixed;
}

interface Serializable
{
    public function serialize();
    public function unserialize(string $data);
}

interface UnitEnum
{
    public static function cases(): array;
}

interface BackedEnum extends UnitEnum
{
    public static function from(int|string $value);
    public static function tryFrom(int|string $value);
}

interface Throwable extends Stringable
{
    public function getMessage(): string;
    public function getCode();
    public function getFile(): string;
    public function getLine(): int;
    public function getTrace(): array;
    public function getTraceAsString(): string;
    public function getPrevious(): ?Throwable;
}

class stdClass
{
}

final class Closure
{
    private function __construct() {}
    public static function fromCallable(callable $callback): Closure {}
}

class ArrayIterator implements SeekableIterator, ArrayAccess, Countable
{
    public function __construct(array|object $array = [], int $flags = 0) {}
}

interface SeekableIterator extends Iterator
{
    public function seek(int $offset): void;
}

class Exception implements Throwable
{
    protected $message = "";
    protected $code = 0;
    protected string $file = "";
    protected int $line = 0;
    private ?Throwable $previous = null;

    public function __construct(string $message = "", int $code = 0, ?Throwable $previous = null) {}
    final public function getMessage(): string {}
    final public function getCode() {}
    final public function getFile(): string {}
    final public function getLine(): int {}
    final public function getTrace(): array {}
    final public function getPrevious(): ?Throwable {}
    final public function getTraceAsString(): string {}
    public function __toString(): string {}
}

class ErrorException extends Exception
{
    protected int $severity = E_ERROR;

    public function __construct(string $message = "", int $code = 0, int $severity = E_ERROR, ?string $filename = null, ?int $line = null, ?Throwable $previous = null) {}
    final public function getSeverity(): int {}
}

class Error implements Throwable
{
    protected $message = "";
    protected $code = 0;
    protected string $file = "";
    protected int $line = 0;
    private ?Throwable $previous = null;

    public function __construct(string $message = "", int $code = 0, ?Throwable $previous = null) {}
    final public function getMessage(): string {}
    final public function getCode() {}
    final public function getFile(): string {}
    final public function getLine(): int {}
    final public function getTrace(): array {}
    final public function getPrevious(): ?Throwable {}
    final public function getTraceAsString(): string {}
    public function __toString(): string {}
}

class TypeError extends Error {}
class ValueError extends Error {}
class ArithmeticError extends Error {}
class DivisionByZeroError extends ArithmeticError {}
class ArgumentCountError extends TypeError {}

class LogicException extends Exception {}
class BadFunctionCallException extends LogicException {}
class BadMethodCallException extends BadFunctionCallException {}
class DomainException extends LogicException {}
class InvalidArgumentException extends LogicException {}
class LengthException extends LogicException {}
class OutOfRangeException extends LogicException {}

class RuntimeException extends Exception {}
class OutOfBoundsException extends RuntimeException {}
class OverflowException extends RuntimeException {}
class RangeException extends RuntimeException {}
class UnderflowException extends RuntimeException {}
class UnexpectedValueException extends RuntimeException {}
"""


@lru_cache(maxsize=1)
def builtin_declarations() -> FileDeclarations:
    """Parsed built-in stubs (parsed once per process, never mutated)."""
    return PhpParser().parse_source(_STUBS.encode("utf-8"), BUILTINS_PATH)
