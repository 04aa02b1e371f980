from .evaluator import PolicyEvaluator, parse_order_tags

__all__ = ["PolicyEvaluator", "parse_order_tags"]
