"""
Commanda binding: from raw tokens to a complete argument vector.

Phases (run once per dispatch, in this order)
1. BindingPlan(descriptor)
   Classify every declared parameter into exactly one partition:
   • positional: indices in declaration order (consumed as a queue),
   • named: alias ("--container-name") → index,
   • external: indices resolved later through the resolver.
   Plans are cheap (linear in the parameter count) and never cached.

2. parse(plan, tokens, vector)
   Single left-to-right pass, no backtracking, each token consumed at most once:
   • "--alias" of a boolean option: the following token, when present and not
     itself "--"-prefixed, is consumed as the flag's explicit value. A value
     that is not a boolean literal leaves the flag True. Without such a token
     the flag is True and nothing is consumed.
   • "--alias" of any other option: the following non-"--" token is consumed
     and converted; a failed conversion or a missing token stores Unset.
   • "--unknown": skipped; the following token is left alone.
   • anything else: converted into the next free positional slot, or dropped
     when every positional slot is taken.

3. complete(plan, vector)
   Fill what parsing left Unset: declared defaults first; boolean options fall
   back to False; anything else raises MissingOptionError (naming the alias)
   or MissingArgumentError (naming the parameter). The first missing value
   aborts; external slots are left for the dispatcher.
"""
import logging
from collections import deque

from .arguments import Kind, Named, Positional, Injected, classify, convert, parse_boolean
from .faults import MissingArgumentError, MissingOptionError
from .utils import Unset, coalesce

logger = logging.getLogger(__name__)


class BindingPlan:
    """
    Per-dispatch partition of a command's parameters.

    Attributes
    - descriptor: the command being dispatched.
    - roles: the role of each parameter, indexed like descriptor.parameters.
    - positional: list of indices, declaration order.
    - named: dict alias → index.
    - external: list of indices, declaration order.
    """

    def __init__(self, descriptor, /):
        self.descriptor = descriptor
        self.roles = tuple(map(classify, descriptor.parameters))
        self.positional = []
        self.named = {}
        self.external = []

        for index, role in enumerate(self.roles):
            match role:
                case Positional():
                    self.positional.append(index)
                case Named(alias=alias):
                    self.named[alias] = index
                case Injected():
                    self.external.append(index)

        logger.debug(
            "plan for %r: %d positional, %d named, %d external",
            descriptor.name, len(self.positional), len(self.named), len(self.external),
        )

    def vector(self):
        """
        Return a fresh argument vector: one Unset slot per parameter.
        """
        return [Unset] * len(self.roles)


def parse(plan, tokens, vector, /):
    """
    Walk tokens against plan, filling vector in place (see module docs).
    """
    parameters = plan.descriptor.parameters
    cardinals = deque(plan.positional)
    tokens = deque(tokens)

    while tokens:
        token = tokens.popleft()

        if token.startswith("--"):
            if (index := plan.named.get(token)) is None:
                logger.debug("ignoring unknown option %r", token)
                continue

            # Never read another "--" token as this option's value.
            value = tokens.popleft() if tokens and not tokens[0].startswith("--") else Unset

            if parameters[index].tag is Kind.BOOLEAN:
                vector[index] = True if value is Unset else coalesce(parse_boolean(value), True)
            else:
                vector[index] = Unset if value is Unset else convert(value, parameters[index].type)
        elif cardinals:
            index = cardinals.popleft()
            vector[index] = convert(token, parameters[index].type)
        else:
            logger.debug("dropping surplus token %r", token)

    return vector


def complete(plan, vector, /):
    """
    Apply defaults to unset bindable slots or raise the first missing value.
    """
    for index, (parameter, role) in enumerate(zip(plan.descriptor.parameters, plan.roles)):
        if vector[index] is not Unset:
            continue

        match role:
            case Named(alias=alias):
                if parameter.has_default:
                    vector[index] = parameter.default
                elif parameter.tag is Kind.BOOLEAN:
                    vector[index] = False
                else:
                    raise MissingOptionError(f"missing required option '{alias}'")
            case Positional():
                if not parameter.has_default:
                    raise MissingArgumentError(f"missing required argument '{parameter.name}'")
                vector[index] = parameter.default

    return vector


def bind(descriptor, tokens, /):
    """
    Build the plan for descriptor and run parse + complete over tokens.

    Returns (plan, vector); external slots are still Unset.
    """
    plan = BindingPlan(descriptor)
    vector = complete(plan, parse(plan, tokens, plan.vector()))
    return plan, vector


__all__ = (
    "BindingPlan",
    "parse",
    "complete",
    "bind",
)
