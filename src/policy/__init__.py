"""Update policies: pin classification and minimum release age."""
