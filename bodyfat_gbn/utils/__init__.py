#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
工具模块
"""
from bodyfat_gbn.utils.io import load_data, save_data, save_metadata, save_text
from bodyfat_gbn.utils.logging import setup_logger, set_level
from bodyfat_gbn.utils.config import load_config, override_config, coerce_settings, ensure_dir
from bodyfat_gbn.utils.data_split import split_train_test, validate_split

__all__ = [
    'load_data',
    'save_data',
    'save_metadata',
    'save_text',
    'setup_logger',
    'set_level',
    'load_config',
    'override_config',
    'coerce_settings',
    'ensure_dir',
    'split_train_test',
    'validate_split'
]
