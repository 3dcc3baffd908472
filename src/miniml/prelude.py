import functools

from miniml import abstract_syntax as ast, parser

PRELUDE_SRC = r"""
let id x = x;
let const x _ = x;
let compose f g x = f (g x);
let not b = if b then False else True;

let rec length [] = 0
      | length (_ :: t) = 1 + length t;

let rec map f xs = match xs with
  | [] -> []
  | h :: t -> f h :: map f t;

let rec filter p xs = match xs with
  | [] -> []
  | h :: t -> if p h then h :: filter p t else filter p t;

let rec foldr f z xs = match xs with
  | [] -> z
  | h :: t -> f h (foldr f z t);

let rec foldl f z xs = match xs with
  | [] -> z
  | h :: t -> foldl f (f z h) t;

let rec append xs ys = match xs with
  | [] -> ys
  | h :: t -> h :: append t ys;

let reverse xs = foldl (\acc x -> x :: acc) [] xs;
let sum xs = foldl (\a b -> a + b) 0 xs;
let null xs = match xs with | [] -> True | _ -> False;

# partial: applying these to [] fails at runtime
let head (h :: _) = h;
let tail (_ :: t) = t
"""


@functools.cache
def prelude_script() -> ast.Script:
    return parser.parse_script(PRELUDE_SRC)
